import copy
import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from lxml import etree

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault
from twinfield.shared.infrastructure.soap.envelopes import build_element, tw
from twinfield.shared.infrastructure.soap.twinfield_async_client import (
    TwinfieldAsyncClient,
)
from twinfield.shared.infrastructure.xml.mapped_response_collection import (
    MappedResponse,
    MappedResponseCollection,
)
from twinfield.shared.infrastructure.xml.response import Response

T = TypeVar("T")
logger = logging.getLogger(__name__)


class ProcessXmlService:
    """Sends XML documents through Twinfield's ``ProcessXmlString`` web method."""

    DEFAULT_CHUNK_SIZE = 20
    _SERVICE_PATH = "/webservices/processxml.asmx"
    _ACTION = "http://www.twinfield.com/ProcessXmlString"

    def __init__(
        self, client: TwinfieldAsyncClient, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        self._client = client
        self._chunk_size = chunk_size

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def chunk(self, items: Sequence[T]) -> list[list[T]]:
        return [
            list(items[start : start + self._chunk_size])
            for start in range(0, len(items), self._chunk_size)
        ]

    async def send_document(self, document: etree._Element) -> Response:
        body = build_element(
            "ProcessXmlString",
            {"xmlRequest": etree.tostring(document, encoding="unicode")},
        )
        payload = await self._client.call(self._SERVICE_PATH, self._ACTION, body)
        result = payload.findtext(tw("ProcessXmlStringResult"))
        if not result:
            raise ShapeFault("ProcessXmlString response has no result document")
        return Response.from_string(result)

    def map_all(
        self,
        responses: Sequence[Response],
        individual_tag: str,
        mapper: Callable[[Response], T],
        sources: Sequence[Any] | None = None,
    ) -> MappedResponseCollection[T]:
        individual_responses: list[Response] = []
        for response in responses:
            elements = list(response.root.iter(individual_tag))
            if not elements and not response.is_successful():
                raise RemoteServiceError(response.error_messages())
            individual_responses.extend(Response(copy.deepcopy(element)) for element in elements)

        if sources is not None and len(sources) != len(individual_responses):
            raise ShapeFault(
                f"Twinfield answered {len(individual_responses)} <{individual_tag}> "
                f"element(s) for {len(sources)} submitted item(s)"
            )

        mapped: list[MappedResponse[T]] = []
        for position, individual in enumerate(individual_responses):
            source = sources[position] if sources is not None else None
            if individual.is_successful():
                mapped.append(
                    MappedResponse(response=individual, result=mapper(individual), source=source)
                )
            else:
                error = RemoteServiceError(individual.error_messages())
                logger.warning(
                    "twinfield_item_rejected tag=%s position=%s error=%s",
                    individual_tag,
                    position,
                    str(error),
                    extra={"tag": individual_tag, "position": position},
                )
                mapped.append(MappedResponse(response=individual, error=error, source=source))
        return MappedResponseCollection(mapped)
