from datetime import date
from decimal import Decimal

from lxml import etree

from twinfield.invoicing.domain.entities.invoice import Invoice, InvoiceLine


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _append_fields(parent: etree._Element, fields: list[tuple[str, object]]) -> None:
    for tag, value in fields:
        if value is None:
            continue
        etree.SubElement(parent, tag).text = _format_value(value)


class InvoicesDocument:
    """A ``<salesinvoices>`` document carrying one or more invoices, in order."""

    def __init__(self) -> None:
        self._root = etree.Element("salesinvoices")

    @property
    def root(self) -> etree._Element:
        return self._root

    def __len__(self) -> int:
        return len(self._root)

    def add_invoice(self, invoice: Invoice) -> None:
        element = etree.SubElement(self._root, "salesinvoice")
        header = etree.SubElement(element, "header")
        _append_fields(
            header,
            [
                ("office", invoice.office.code if invoice.office else None),
                ("invoicetype", invoice.invoice_type),
                ("invoicenumber", invoice.invoice_number),
                ("invoicedate", invoice.invoice_date),
                ("duedate", invoice.due_date),
                ("performancedate", invoice.performance_date),
                ("bank", invoice.bank),
                ("invoiceaddressnumber", invoice.invoice_address_number),
                ("deliveraddressnumber", invoice.deliver_address_number),
                ("customer", invoice.customer.code if invoice.customer else None),
                ("period", invoice.period),
                ("currency", invoice.currency),
                ("status", invoice.status),
                ("paymentmethod", invoice.payment_method),
                ("headertext", invoice.header_text),
                ("footertext", invoice.footer_text),
            ],
        )

        if invoice.lines:
            lines = etree.SubElement(element, "lines")
            for position, line in enumerate(invoice.lines, start=1):
                self._add_line(lines, line, position)

    @staticmethod
    def _add_line(lines: etree._Element, line: InvoiceLine, position: int) -> None:
        element = etree.SubElement(lines, "line", id=line.line_id or str(position))
        _append_fields(
            element,
            [
                ("article", line.article),
                ("subarticle", line.subarticle),
                ("quantity", line.quantity),
                ("units", line.units),
                ("allowdiscountorpremium", line.allow_discount_or_premium),
                ("description", line.description),
                ("unitspriceexcl", line.units_price_excl),
                ("vatcode", line.vat_code),
                ("freetext1", line.free_text1),
                ("freetext2", line.free_text2),
                ("freetext3", line.free_text3),
                ("performancetype", line.performance_type),
                ("performancedate", line.performance_date),
                ("dim1", line.dim1),
            ],
        )
