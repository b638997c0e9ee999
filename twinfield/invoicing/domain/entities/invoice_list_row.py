from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from twinfield.invoicing.domain.entities.customer import Customer
from twinfield.invoicing.domain.entities.invoice import Invoice, InvoiceTotals
from twinfield.invoicing.domain.errors import ShapeFault


@dataclass(frozen=True, slots=True)
class InvoiceListRow:
    """One row of the "available invoices" finder result.

    Twinfield returns the row as a positional array of strings:
    number, value including tax, customer code, an unused column and the
    debit/credit indicator.
    """

    WIDTH = 5

    invoice_number: str
    value_inc: str
    customer_code: str
    reserved: str
    debit_credit: str

    @classmethod
    def from_strings(cls, values: Sequence[str]) -> "InvoiceListRow":
        if len(values) < cls.WIDTH:
            raise ShapeFault(
                f"Invoice finder row has {len(values)} column(s), expected {cls.WIDTH}: "
                + repr(list(values))
            )
        return cls(
            invoice_number=values[0],
            value_inc=values[1],
            customer_code=values[2],
            reserved=values[3],
            debit_credit=values[4],
        )

    def to_invoice(self) -> Invoice:
        try:
            value_inc = Decimal(self.value_inc) if self.value_inc else None
        except InvalidOperation as exc:
            raise ShapeFault(
                f"Invoice {self.invoice_number} has a non-numeric total {self.value_inc!r}"
            ) from exc
        return Invoice(
            invoice_number=self.invoice_number,
            totals=InvoiceTotals(value_inc=value_inc),
            customer=Customer(code=self.customer_code),
            debit_credit=self.debit_credit,
        )
