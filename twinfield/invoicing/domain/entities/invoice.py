from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from twinfield.invoicing.domain.entities.customer import Customer
from twinfield.invoicing.domain.entities.office import Office


@dataclass(frozen=True, slots=True)
class InvoiceTotals:
    value_inc: Decimal | None = None
    value_excl: Decimal | None = None


@dataclass(frozen=True, slots=True)
class InvoiceLine:
    line_id: str | None = None
    article: str | None = None
    subarticle: str | None = None
    quantity: Decimal | None = None
    units: int | None = None
    allow_discount_or_premium: bool | None = None
    description: str | None = None
    value_excl: Decimal | None = None
    vat_value: Decimal | None = None
    value_inc: Decimal | None = None
    units_price_excl: Decimal | None = None
    vat_code: str | None = None
    free_text1: str | None = None
    free_text2: str | None = None
    free_text3: str | None = None
    performance_type: str | None = None
    performance_date: date | None = None
    dim1: str | None = None


@dataclass(frozen=True, slots=True)
class Invoice:
    """A Twinfield sales invoice.

    Identified by ``(invoice_type, invoice_number)`` within an office. Listing
    returns partial invoices that only carry the number, totals, customer and
    debit/credit indicator.
    """

    invoice_type: str | None = None
    invoice_number: str | None = None
    office: Office | None = None
    customer: Customer | None = None
    totals: InvoiceTotals | None = None
    debit_credit: str | None = None
    status: str | None = None
    currency: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    performance_date: date | None = None
    period: str | None = None
    bank: str | None = None
    payment_method: str | None = None
    invoice_address_number: int | None = None
    deliver_address_number: int | None = None
    header_text: str | None = None
    footer_text: str | None = None
    lines: tuple[InvoiceLine, ...] = ()
    financial_code: str | None = None
    financial_number: str | None = None

    def missing_required_fields(self) -> list[str]:
        missing = []
        if self.office is None or not self.office.code:
            missing.append("office")
        if not self.invoice_type:
            missing.append("invoice_type")
        if self.customer is None or not self.customer.code:
            missing.append("customer")
        return missing
