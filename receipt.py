"""
Project: SmartOrder Restaurant POS
Date: October 2025

Description:
Field derivation for the customer receipt handed to the print/PDF side.

The access key and protocol number are random placeholders. They are NOT
issued by any tax authority and the receipt is flagged as mock fiscal data;
a compliant receipt needs an external certified authorization service.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from domain import CompanySettings, money, utcnow
from lifecycle import group_open_orders_by_customer

TAX_DISCLOSURE_RATE = Decimal("0.12")

PAYMENT_LABELS = {
    "cash": "Cash",
    "credit": "Credit card",
    "debit": "Debit card",
    "pix": "PIX",
}


@dataclass
class ReceiptLine:
    quantity: int
    name: str
    unit_price: Decimal
    line_total: Decimal
    notes: str = ""

    @property
    def text(self):
        return f"{self.quantity} x {self.name} @ {self.unit_price:.2f} = {self.line_total:.2f}"


@dataclass
class CustomerSection:
    customer_name: str
    lines: list
    subtotal: Decimal


@dataclass
class Receipt:
    table_id: str
    company: CompanySettings
    customers: list
    subtotal: Decimal
    service_fee: Decimal
    total: Decimal
    tax_estimate: Decimal
    payment_method: str
    amount_paid: Decimal
    change: Decimal
    issued_at: datetime
    access_key: str
    protocol: str
    mock_fiscal_data: bool = field(default=True)

    def to_dict(self):
        return {
            "table_id": self.table_id,
            "company": dict(self.company.to_dict(), address=self.company.address_line),
            "customers": [
                {
                    "customer_name": c.customer_name,
                    "lines": [
                        {
                            "quantity": ln.quantity,
                            "name": ln.name,
                            "unit_price": float(ln.unit_price),
                            "line_total": float(ln.line_total),
                            "notes": ln.notes,
                            "text": ln.text,
                        }
                        for ln in c.lines
                    ],
                    "subtotal": float(c.subtotal),
                }
                for c in self.customers
            ],
            "subtotal": float(self.subtotal),
            "service_fee": float(self.service_fee),
            "total": float(self.total),
            "tax_estimate": float(self.tax_estimate),
            "payment_method": self.payment_method,
            "payment_label": PAYMENT_LABELS.get(self.payment_method, self.payment_method),
            "amount_paid": float(self.amount_paid),
            "change": float(self.change),
            "issued_at": self.issued_at.isoformat(),
            "access_key": self.access_key,
            "protocol": self.protocol,
            "mock_fiscal_data": self.mock_fiscal_data,
        }


def _digits(rng, count):
    return "".join(str(rng.randrange(10)) for _ in range(count))


def placeholder_access_key(rng=None):
    digits = _digits(rng or random.Random(), 44)
    return " ".join(digits[i:i + 4] for i in range(0, 44, 4))


def placeholder_protocol(rng=None):
    return _digits(rng or random.Random(), 15)


def build_receipt(orders, table_id, bill, settlement, settings, issued_at=None, rng=None):
    """Derive every printed value for closing `table_id`.

    `bill` comes from billing.compute_bill and `settlement` from billing.settle,
    both computed over the same order snapshot passed here.
    """
    rng = rng or random.Random()
    customers = []
    for name, customer_orders in group_open_orders_by_customer(orders, table_id).items():
        lines = [
            ReceiptLine(
                quantity=item.quantity,
                name=item.name,
                unit_price=money(item.price),
                line_total=money(item.price * item.quantity),
                notes=item.notes,
            )
            for o in customer_orders
            for item in o.items
        ]
        subtotal = money(sum((o.total for o in customer_orders), Decimal("0")))
        customers.append(CustomerSection(name, lines, subtotal))

    return Receipt(
        table_id=str(table_id),
        company=settings,
        customers=customers,
        subtotal=bill.subtotal,
        service_fee=bill.service_fee,
        total=bill.total,
        tax_estimate=money(bill.total * TAX_DISCLOSURE_RATE),
        payment_method=settlement.method.value,
        amount_paid=settlement.amount_paid,
        change=settlement.change,
        issued_at=issued_at or utcnow(),
        access_key=placeholder_access_key(rng),
        protocol=placeholder_protocol(rng),
    )


def _row(left, right, width):
    gap = max(1, width - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


def receipt_text(receipt, width=48):
    """Fixed-width plain text version of a receipt."""
    rule = "-" * width
    company = receipt.company
    out = []
    for value in (company.trade_name, company.legal_name):
        if value:
            out.append(value.center(width).rstrip())
    if company.tax_id:
        out.append(f"Tax ID: {company.tax_id}")
    if company.state_registration:
        out.append(f"State reg.: {company.state_registration}")
    if company.address_line:
        out.append(company.address_line)
    out.append(rule)
    out.append(f"Table {receipt.table_id}  {receipt.issued_at:%Y-%m-%d %H:%M}")
    for section in receipt.customers:
        out.append(rule)
        out.append(section.customer_name)
        for line in section.lines:
            out.append(f"  {line.text}")
            if line.notes:
                out.append(f"    ({line.notes})")
        out.append(_row("  Subtotal", f"{section.subtotal:.2f}", width))
    out.append(rule)
    out.append(_row("Subtotal", f"{receipt.subtotal:.2f}", width))
    out.append(_row("Service fee", f"{receipt.service_fee:.2f}", width))
    out.append(_row("TOTAL", f"{receipt.total:.2f}", width))
    out.append(_row(PAYMENT_LABELS.get(receipt.payment_method, receipt.payment_method),
                    f"{receipt.amount_paid:.2f}", width))
    out.append(_row("Change", f"{receipt.change:.2f}", width))
    out.append(rule)
    out.append(f"Approx. taxes (12%): {receipt.tax_estimate:.2f}")
    out.append("Access key:")
    groups = receipt.access_key.split()
    out.append(" ".join(groups[:6]))
    out.append(" ".join(groups[6:]))
    out.append(f"Protocol: {receipt.protocol}")
    out.append("MOCK DATA - NOT A VALID FISCAL DOCUMENT")
    return "\n".join(out)
