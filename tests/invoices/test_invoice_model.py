from datetime import date
from decimal import Decimal

from src.firm_ops.firm_ops.core.enums import InvoiceStatus
from src.firm_ops.firm_ops.invoices.model import Invoice, InvoiceItem


def _invoice(**kwargs) -> Invoice:
    base = dict(
        organization_id=1,
        invoice_number="DEMO-2025-001",
        client_name="Acme",
        issue_date=date(2025, 3, 1),
        due_date=date(2025, 3, 31),
    )
    base.update(kwargs)
    return Invoice(**base)


def _assert_totals(inv: Invoice) -> None:
    assert inv.subtotal == sum((i.amount for i in inv.items), Decimal("0"))
    assert inv.total_amount == inv.subtotal + inv.tax_amount
    assert inv.balance_amount == inv.total_amount - inv.paid_amount


def test_two_items_with_ten_percent_tax():
    inv = _invoice(tax_rate=Decimal("10"))
    inv.add_item(InvoiceItem(description="Design", quantity=Decimal("2"), unit_price=Decimal("100")))
    inv.add_item(InvoiceItem(description="Survey", unit_price=Decimal("50")))

    assert inv.subtotal == Decimal("250.00")
    assert inv.tax_amount == Decimal("25.00")
    assert inv.total_amount == Decimal("275.00")
    assert inv.balance_amount == Decimal("275.00")
    _assert_totals(inv)


def test_item_amount_and_default_quantity():
    item = InvoiceItem(description="Hours", quantity=Decimal("1.5"), unit_price=Decimal("80.25"))

    assert item.amount == Decimal("120.38")
    assert InvoiceItem(description="Fee", unit_price=Decimal("10")).quantity == Decimal("1")


def test_remove_item_recalculates():
    inv = _invoice(tax_rate=Decimal("10"))
    inv.add_item(InvoiceItem(description="A", unit_price=Decimal("100")))
    position = inv.add_item(InvoiceItem(description="B", unit_price=Decimal("40")))

    removed = inv.remove_item(position)

    assert removed.description == "B"
    assert inv.subtotal == Decimal("100.00")
    assert inv.total_amount == Decimal("110.00")
    _assert_totals(inv)


def test_recalculate_is_idempotent():
    inv = _invoice(tax_rate=Decimal("18.5"), paid_amount=Decimal("10"))
    inv.replace_items([InvoiceItem(description="A", quantity=Decimal("3"), unit_price=Decimal("33.33"))])
    first = (inv.subtotal, inv.tax_amount, inv.total_amount, inv.balance_amount)

    inv.recalculate()

    assert (inv.subtotal, inv.tax_amount, inv.total_amount, inv.balance_amount) == first
    assert inv.tax_amount == Decimal("18.50")
    _assert_totals(inv)


def test_tax_rate_uses_four_decimal_places():
    inv = _invoice(tax_rate=Decimal("12.345"))
    inv.replace_items([InvoiceItem(description="A", unit_price=Decimal("1000"))])

    # 12.345% -> 0.1235 before applying to the subtotal
    assert inv.tax_amount == Decimal("123.50")


def test_empty_invoice_totals_are_zero():
    inv = _invoice().recalculate()

    assert inv.subtotal == Decimal("0")
    assert inv.total_amount == Decimal("0")


def test_overdue_is_derived_from_due_date():
    inv = _invoice(status=InvoiceStatus.SENT)

    assert inv.effective_status(date(2025, 3, 31)) == InvoiceStatus.SENT
    assert inv.effective_status(date(2025, 4, 1)) == InvoiceStatus.OVERDUE
    assert inv.status == InvoiceStatus.SENT

    inv.status = InvoiceStatus.PAID
    assert inv.is_overdue(date(2025, 4, 1)) is False


def test_to_dict_lists_items_by_position():
    inv = _invoice()
    inv.add_item(InvoiceItem(description="A", unit_price=Decimal("1")))
    inv.add_item(InvoiceItem(description="B", unit_price=Decimal("2")))

    data = inv.to_dict(today=date(2025, 3, 2))

    assert [i["position"] for i in data["items"]] == [0, 1]
    assert data["effective_status"] == "DRAFT"
    assert data["total_amount"] == "3.00"
