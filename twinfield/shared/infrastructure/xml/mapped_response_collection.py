from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, overload

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault
from twinfield.shared.infrastructure.xml.response import Response

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class MappedResponse(Generic[T]):
    response: Response
    result: T | None = None
    error: Exception | None = None
    source: Any = None

    @property
    def is_successful(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.result  # type: ignore[return-value]


class MappedResponseCollection(Sequence[MappedResponse[T]]):
    """Mapped results of a batch submission, in submission order."""

    def __init__(self, items: Sequence[MappedResponse[T]] = ()) -> None:
        self._items: tuple[MappedResponse[T], ...] = tuple(items)

    @overload
    def __getitem__(self, index: int) -> MappedResponse[T]: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[MappedResponse[T]]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[MappedResponse[T]]:
        return iter(self._items)

    def has_failed_responses(self) -> bool:
        return any(not item.is_successful for item in self._items)

    def failed_responses(self) -> list[MappedResponse[T]]:
        return [item for item in self._items if not item.is_successful]

    def successful_responses(self) -> list[MappedResponse[T]]:
        return [item for item in self._items if item.is_successful]

    def results(self) -> list[T]:
        return [item.unwrap() for item in self._items]

    def assert_successful(self) -> None:
        failed = self.failed_responses()
        if not failed:
            return
        messages: list[str] = []
        for item in failed:
            if isinstance(item.error, RemoteServiceError):
                messages.extend(item.error.messages)
            else:
                messages.append(str(item.error))
        raise RemoteServiceError(
            [f"{len(failed)} of {len(self._items)} item(s) were rejected by Twinfield"]
            + messages
        )

    def unwrap_single(self) -> T:
        if len(self._items) != 1:
            raise ShapeFault(
                f"Expected exactly one mapped response, got {len(self._items)}"
            )
        return self._items[0].unwrap()
