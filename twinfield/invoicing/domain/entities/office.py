from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Office:
    code: str
    name: str | None = None
