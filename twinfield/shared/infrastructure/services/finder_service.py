import logging
from collections.abc import Mapping
from dataclasses import dataclass

from lxml import etree
from opentelemetry import trace

from twinfield.invoicing.domain.errors import RemoteServiceError, ShapeFault
from twinfield.shared.infrastructure.soap.envelopes import build_element, tw
from twinfield.shared.infrastructure.soap.twinfield_async_client import (
    TwinfieldAsyncClient,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True, slots=True)
class SearchResult:
    total_rows: int
    columns: tuple[str, ...] = ()
    items: tuple[tuple[str, ...], ...] = ()


class FinderService:
    """Paginated search over Twinfield's finder web service."""

    TYPE_LIST_OF_AVAILABLE_INVOICES = "IVT"

    _SERVICE_PATH = "/webservices/finder.asmx"
    _ACTION = "http://www.twinfield.com/Search"

    def __init__(self, client: TwinfieldAsyncClient) -> None:
        self._client = client

    async def search_finder(
        self,
        finder_type: str,
        pattern: str,
        field: int,
        first_row: int,
        max_rows: int,
        options: Mapping[str, str] | None = None,
    ) -> SearchResult:
        body = build_element(
            "Search",
            {
                "type": finder_type,
                "pattern": pattern,
                "field": field,
                "firstRow": first_row,
                "maxRows": max_rows,
            },
        )
        options_element = etree.SubElement(body, tw("options"))
        for name, value in (options or {}).items():
            pair = etree.SubElement(options_element, tw("ArrayOfString"))
            etree.SubElement(pair, tw("string")).text = name
            etree.SubElement(pair, tw("string")).text = value

        with tracer.start_as_current_span("finder_service.search"):
            payload = await self._client.call(self._SERVICE_PATH, self._ACTION, body)

        errors = [
            message.findtext(tw("Text")) or message.findtext(tw("Code")) or ""
            for message in payload.iterfind(
                f"{tw('SearchResult')}/{tw('MessageOfErrorCodes')}"
            )
            if message.findtext(tw("Type")) == "Error"
        ]
        if errors:
            raise RemoteServiceError(errors)

        result = self._parse_data(payload.find(tw("data")))
        logger.debug(
            "finder_search_completed type=%s total_rows=%s returned=%s",
            finder_type,
            result.total_rows,
            len(result.items),
        )
        return result

    @staticmethod
    def _parse_data(data: etree._Element | None) -> SearchResult:
        if data is None:
            raise ShapeFault("Finder response has no data element")
        total_rows_text = data.findtext(tw("TotalRows"))
        try:
            total_rows = int(total_rows_text or 0)
        except ValueError as exc:
            raise ShapeFault(f"Finder TotalRows is not a number: {total_rows_text!r}") from exc

        columns = tuple(
            column.text or "" for column in data.iterfind(f"{tw('Columns')}/{tw('string')}")
        )
        items = tuple(
            tuple(value.text or "" for value in row.iterfind(tw("string")))
            for row in data.iterfind(f"{tw('Items')}/{tw('ArrayOfString')}")
        )
        return SearchResult(total_rows=total_rows, columns=columns, items=items)
