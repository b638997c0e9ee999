from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Customer:
    code: str
    name: str | None = None
