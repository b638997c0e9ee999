from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from lxml import etree

from twinfield.invoicing.domain.entities.customer import Customer
from twinfield.invoicing.domain.entities.invoice import Invoice, InvoiceLine, InvoiceTotals
from twinfield.invoicing.domain.entities.office import Office
from twinfield.invoicing.domain.errors import ShapeFault
from twinfield.shared.infrastructure.xml.response import Response


class InvoiceMapper:
    """Maps a ``<salesinvoice>`` response element onto an :class:`Invoice`."""

    @staticmethod
    def _text(element: etree._Element | None, tag: str) -> str | None:
        if element is None:
            return None
        value = element.findtext(tag)
        return value if value else None

    @staticmethod
    def _parse_decimal(value: str | None) -> Decimal | None:
        if value is None:
            return None
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise ShapeFault(f"Expected a decimal amount, got {value!r}") from exc

    @staticmethod
    def _parse_int(value: str | None) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except ValueError as exc:
            raise ShapeFault(f"Expected an integer, got {value!r}") from exc

    @staticmethod
    def _parse_date(value: str | None) -> date | None:
        if value is None:
            return None
        try:
            return datetime.strptime(value, "%Y%m%d").date()
        except ValueError as exc:
            raise ShapeFault(f"Expected a YYYYMMDD date, got {value!r}") from exc

    @staticmethod
    def _parse_bool(value: str | None) -> bool | None:
        if value is None:
            return None
        return value.lower() == "true"

    @classmethod
    def map(cls, response: Response) -> Invoice:
        root = response.root
        if root.tag != "salesinvoice":
            raise ShapeFault(f"Expected a <salesinvoice> element, got <{root.tag}>")
        header = root.find("header")
        if header is None:
            raise ShapeFault("Sales invoice response has no <header>")

        office_element = header.find("office")
        office = None
        if office_element is not None and office_element.text:
            office = Office(code=office_element.text, name=office_element.get("name"))

        customer_element = header.find("customer")
        customer = None
        if customer_element is not None and customer_element.text:
            customer = Customer(code=customer_element.text, name=customer_element.get("name"))

        totals_element = root.find("totals")
        totals = None
        if totals_element is not None:
            totals = InvoiceTotals(
                value_inc=cls._parse_decimal(cls._text(totals_element, "valueinc")),
                value_excl=cls._parse_decimal(cls._text(totals_element, "valueexcl")),
            )

        financials = root.find("financials")
        return Invoice(
            invoice_type=cls._text(header, "invoicetype"),
            invoice_number=cls._text(header, "invoicenumber"),
            office=office,
            customer=customer,
            totals=totals,
            status=cls._text(header, "status"),
            currency=cls._text(header, "currency"),
            invoice_date=cls._parse_date(cls._text(header, "invoicedate")),
            due_date=cls._parse_date(cls._text(header, "duedate")),
            performance_date=cls._parse_date(cls._text(header, "performancedate")),
            period=cls._text(header, "period"),
            bank=cls._text(header, "bank"),
            payment_method=cls._text(header, "paymentmethod"),
            invoice_address_number=cls._parse_int(cls._text(header, "invoiceaddressnumber")),
            deliver_address_number=cls._parse_int(cls._text(header, "deliveraddressnumber")),
            header_text=cls._text(header, "headertext"),
            footer_text=cls._text(header, "footertext"),
            lines=tuple(cls._map_line(line) for line in root.iterfind("lines/line")),
            financial_code=cls._text(financials, "code"),
            financial_number=cls._text(financials, "number"),
        )

    @classmethod
    def _map_line(cls, line: etree._Element) -> InvoiceLine:
        return InvoiceLine(
            line_id=line.get("id"),
            article=cls._text(line, "article"),
            subarticle=cls._text(line, "subarticle"),
            quantity=cls._parse_decimal(cls._text(line, "quantity")),
            units=cls._parse_int(cls._text(line, "units")),
            allow_discount_or_premium=cls._parse_bool(cls._text(line, "allowdiscountorpremium")),
            description=cls._text(line, "description"),
            value_excl=cls._parse_decimal(cls._text(line, "valueexcl")),
            vat_value=cls._parse_decimal(cls._text(line, "vatvalue")),
            value_inc=cls._parse_decimal(cls._text(line, "valueinc")),
            units_price_excl=cls._parse_decimal(cls._text(line, "unitspriceexcl")),
            vat_code=cls._text(line, "vatcode"),
            free_text1=cls._text(line, "freetext1"),
            free_text2=cls._text(line, "freetext2"),
            free_text3=cls._text(line, "freetext3"),
            performance_type=cls._text(line, "performancetype"),
            performance_date=cls._parse_date(cls._text(line, "performancedate")),
            dim1=cls._text(line, "dim1"),
        )
