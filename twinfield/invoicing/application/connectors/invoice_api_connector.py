import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from opentelemetry import trace

from twinfield.invoicing.application.connectors.base_api_connector import BaseApiConnector
from twinfield.invoicing.domain.entities.invoice import Invoice
from twinfield.invoicing.domain.entities.invoice_list_row import InvoiceListRow
from twinfield.invoicing.domain.entities.office import Office
from twinfield.invoicing.domain.errors import PreconditionFault
from twinfield.invoicing.infrastructure.xml.invoice_mapper import InvoiceMapper
from twinfield.invoicing.infrastructure.xml.invoices_document import InvoicesDocument
from twinfield.invoicing.infrastructure.xml.read_invoice_request import (
    SALES_INVOICE_TYPE,
    build_read_invoice_request,
)
from twinfield.shared.infrastructure.services.finder_service import FinderService
from twinfield.shared.infrastructure.xml.mapped_response_collection import (
    MappedResponseCollection,
)
from twinfield.shared.infrastructure.xml.response import Response

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True, slots=True)
class InvoiceListOptions:
    """Finder filters for listing invoices.

    The named filters are only sent when set and take precedence over keys of
    the same name in ``extra``.
    """

    office_code: str | None = None
    access_rules: str | None = None
    mutual_offices: bool | None = None
    extra: Mapping[str, str] = field(default_factory=dict)

    def to_finder_options(self) -> dict[str, str]:
        options = dict(self.extra)
        if self.office_code is not None:
            options["office"] = self.office_code
        if self.access_rules is not None:
            options["accessRules"] = self.access_rules
        if self.mutual_offices is not None:
            options["mutualOffices"] = "1" if self.mutual_offices else "0"
        return options


class InvoiceApiConnector(BaseApiConnector):
    """Reads, lists and sends Twinfield sales invoices.

    Multi-chunk writes are not atomic: when a chunk fails, the chunks sent
    before it stay applied in Twinfield.
    """

    async def get(self, code: str, invoice_number: str, office: Office) -> Invoice:
        request = build_read_invoice_request(
            office=office.code, code=code, invoice_number=invoice_number
        )
        response = await self.send_xml_document(request)
        response.assert_successful()
        return InvoiceMapper.map(response)

    async def list_all(
        self,
        office_code: str | None = None,
        access_rules: str | None = None,
        mutual_offices: bool | None = None,
        pattern: str = "*",
        field: int = 0,
        first_row: int = 1,
        max_rows: int = 0,
        options: Mapping[str, str] | None = None,
    ) -> list[Invoice]:
        list_options = InvoiceListOptions(
            office_code=office_code,
            access_rules=access_rules,
            mutual_offices=mutual_offices,
            extra=dict(options or {}),
        )
        result = await self._finder_service.search_finder(
            FinderService.TYPE_LIST_OF_AVAILABLE_INVOICES,
            pattern,
            field,
            first_row,
            max_rows,
            list_options.to_finder_options(),
        )
        if result.total_rows == 0:
            return []

        return [InvoiceListRow.from_strings(row).to_invoice() for row in result.items]

    async def send(self, invoice: Invoice) -> Invoice:
        return self.unwrap_single_response(await self.send_all([invoice]))

    async def send_all(self, invoices: Sequence[Invoice]) -> MappedResponseCollection[Invoice]:
        for position, invoice in enumerate(invoices):
            if not isinstance(invoice, Invoice):
                raise PreconditionFault(
                    f"Item {position} is a {type(invoice).__name__}, expected Invoice"
                )
            missing = invoice.missing_required_fields()
            if missing:
                raise PreconditionFault(
                    f"Invoice at position {position} is missing required field(s): "
                    + ", ".join(missing)
                )

        responses: list[Response] = []
        for chunk_number, chunk in enumerate(self._process_xml_service.chunk(invoices), start=1):
            document = InvoicesDocument()
            for invoice in chunk:
                document.add_invoice(invoice)

            with tracer.start_as_current_span("invoice_connector.send_chunk"):
                responses.append(await self.send_xml_document(document.root))
            logger.info(
                "invoice_chunk_sent chunk=%s size=%s",
                chunk_number,
                len(document),
                extra={"office": chunk[0].office.code, "chunk": chunk_number, "size": len(document)},
            )

        return self._process_xml_service.map_all(
            responses, SALES_INVOICE_TYPE, InvoiceMapper.map, sources=list(invoices)
        )
