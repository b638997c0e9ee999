from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeVar

from lxml import etree

from twinfield.shared.infrastructure.xml.mapped_response_collection import (
    MappedResponseCollection,
)
from twinfield.shared.infrastructure.xml.response import Response

T = TypeVar("T")


class ProcessXmlServicePort(Protocol):
    def chunk(self, items: Sequence[T]) -> list[list[T]]: ...

    async def send_document(self, document: etree._Element) -> Response: ...

    def map_all(
        self,
        responses: Sequence[Response],
        individual_tag: str,
        mapper: Callable[[Response], T],
        sources: Sequence[Any] | None = None,
    ) -> MappedResponseCollection[T]: ...
