from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.firm_ops.firm_ops.core.enums import InvoiceItemType, InvoiceStatus, ParseErrorPolicy
from src.firm_ops.firm_ops.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.firm_ops.firm_ops.invoices.model import InvoiceDraft, InvoiceItem
from src.firm_ops.firm_ops.invoices.service import InvoiceService, build_item
from src.firm_ops.firm_ops.organizations.model import Organization, Project
from tests.fakes import (
    ORG_ID,
    FakeNotifier,
    FakeRenderer,
    InMemoryEmployees,
    InMemoryInvoices,
    InMemoryOrganizations,
    InMemoryProjects,
    admin,
    staff,
)

NOW = datetime(2025, 3, 1, 9, 30)

DESIGN = InvoiceItem(description="Design", quantity=Decimal("2"), unit_price=Decimal("100"))
SURVEY = InvoiceItem(description="Survey", unit_price=Decimal("50"))


def _service(invoices=None, *, projects=None, orgs=None, **kwargs) -> InvoiceService:
    return InvoiceService(
        invoices if invoices is not None else InMemoryInvoices(),
        orgs or InMemoryOrganizations(),
        InMemoryEmployees(),
        projects or InMemoryProjects(),
        **kwargs,
    )


def _draft(**kwargs) -> InvoiceDraft:
    base = dict(client_name="Acme Ltd", tax_rate="10", items=(DESIGN, SURVEY))
    base.update(kwargs)
    return InvoiceDraft(**base)


def test_create_fills_defaults_and_totals():
    invoices = InMemoryInvoices()

    inv = _service(invoices).create_invoice(admin(), _draft(), now=NOW)

    assert inv.invoice_id == 1
    assert inv.invoice_number == "DEMO-2025-001"
    assert inv.issue_date == date(2025, 3, 1)
    assert inv.due_date == date(2025, 3, 31)
    assert inv.status == InvoiceStatus.DRAFT
    assert inv.created_by == admin().user_id
    assert inv.subtotal == Decimal("250.00")
    assert inv.tax_amount == Decimal("25.00")
    assert inv.total_amount == Decimal("275.00")
    assert invoices.rows[1].total_amount == Decimal("275.00")


def test_due_date_follows_issue_date_and_setting():
    inv = _service(due_days=14).create_invoice(admin(), _draft(issue_date=date(2025, 2, 20)), now=NOW)

    assert inv.due_date == date(2025, 3, 6)


def test_explicit_number_is_kept():
    inv = _service().create_invoice(admin(), _draft(invoice_number="  CUSTOM-1 "), now=NOW)

    assert inv.invoice_number == "CUSTOM-1"


def test_numbers_increase_and_are_not_reused_after_delete():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    first = service.create_invoice(admin(), _draft(), now=NOW)
    second = service.create_invoice(admin(), _draft(), now=NOW)

    service.delete_invoice(admin(), second.invoice_id)
    third = service.create_invoice(admin(), _draft(), now=NOW)

    assert [first.invoice_number, second.invoice_number, third.invoice_number] == [
        "DEMO-2025-001",
        "DEMO-2025-002",
        "DEMO-2025-003",
    ]


def test_numbering_continues_after_manual_numbers():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    service.create_invoice(admin(), _draft(invoice_number="DEMO-2025-041"), now=NOW)

    inv = service.create_invoice(admin(), _draft(), now=NOW)

    assert inv.invoice_number == "DEMO-2025-042"


def test_manual_number_between_automatic_ones_is_skipped():
    service = _service(InMemoryInvoices())
    first = service.create_invoice(admin(), _draft(), now=NOW)
    service.create_invoice(admin(), _draft(invoice_number="DEMO-2025-002"), now=NOW)

    third = service.create_invoice(admin(), _draft(), now=NOW)

    assert first.invoice_number == "DEMO-2025-001"
    assert third.invoice_number == "DEMO-2025-003"


def test_short_org_name_is_padded():
    orgs = InMemoryOrganizations(orgs={ORG_ID: Organization(organization_id=ORG_ID, name="K")})

    inv = _service(orgs=orgs).create_invoice(admin(), _draft(), now=NOW)

    assert inv.invoice_number == "KORG-2025-001"


def test_project_fills_blank_client_name():
    projects = InMemoryProjects(projects={5: Project(project_id=5, organization_id=ORG_ID, name="Villa", client_name="Villa Owner")})

    inv = _service(projects=projects).create_invoice(admin(), _draft(client_name="  "), project_id=5, now=NOW)

    assert inv.project_id == 5
    assert inv.client_name == "Villa Owner"


def test_project_of_other_organization_is_not_found():
    projects = InMemoryProjects(projects={5: Project(project_id=5, organization_id=2, name="Other")})

    with pytest.raises(NotFoundError):
        _service(projects=projects).create_invoice(admin(), _draft(), project_id=5, now=NOW)


def test_client_name_is_required():
    with pytest.raises(ValidationError):
        _service().create_invoice(admin(), _draft(client_name=""), now=NOW)


def test_unknown_organization():
    with pytest.raises(NotFoundError):
        _service().create_invoice(admin(org_id=404), _draft(), now=NOW)


def test_only_admins_manage_invoices():
    with pytest.raises(AuthorizationError):
        _service().create_invoice(staff(), _draft(), now=NOW)


def test_partial_payment_is_rejected_and_status_kept():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    inv = service.create_invoice(admin(), _draft(status=InvoiceStatus.SENT), now=NOW)

    with pytest.raises(ValidationError):
        service.record_payment(admin(), inv.invoice_id, "200")

    stored = invoices.rows[inv.invoice_id]
    assert stored.status == InvoiceStatus.SENT
    assert stored.paid_amount == Decimal("0")


def test_full_payment_marks_paid():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    inv = service.create_invoice(admin(), _draft(status=InvoiceStatus.SENT), now=NOW)

    paid = service.record_payment(admin(), inv.invoice_id, "275", payment_date=date(2025, 3, 10))

    assert paid.status == InvoiceStatus.PAID
    assert paid.paid_amount == Decimal("275.00")
    assert paid.balance_amount == Decimal("0")
    assert paid.last_payment_date == date(2025, 3, 10)
    assert invoices.rows[inv.invoice_id].status == InvoiceStatus.PAID


def test_second_payment_is_a_conflict():
    service = _service()
    inv = service.create_invoice(admin(), _draft(), now=NOW)
    service.record_payment(admin(), inv.invoice_id, Decimal("275.00"))

    with pytest.raises(ConflictError):
        service.record_payment(admin(), inv.invoice_id, Decimal("275.00"))


def test_delete_sent_invoice_is_a_conflict():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    inv = service.create_invoice(admin(), _draft(status=InvoiceStatus.SENT), now=NOW)

    with pytest.raises(ConflictError):
        service.delete_invoice(admin(), inv.invoice_id)

    assert inv.invoice_id in invoices.rows


def test_delete_draft_invoice():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    service.delete_invoice(admin(), inv.invoice_id)

    assert invoices.rows == {}


def test_other_organization_cannot_see_invoice():
    orgs = InMemoryOrganizations()
    orgs.orgs[2] = Organization(organization_id=2, name="Other")
    service = _service(orgs=orgs)
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    with pytest.raises(NotFoundError):
        service.get_invoice(admin(org_id=2), inv.invoice_id)


def test_add_and_remove_items_persist_totals():
    invoices = InMemoryInvoices()
    service = _service(invoices)
    inv = service.create_invoice(admin(), _draft(items=None), now=NOW)
    assert inv.total_amount == Decimal("0")

    service.add_item(admin(), inv.invoice_id, DESIGN)
    after_add = service.add_item(admin(), inv.invoice_id, SURVEY)
    assert after_add.total_amount == Decimal("275.00")

    after_remove = service.remove_item(admin(), inv.invoice_id, 0)
    assert [i.description for i in after_remove.items] == ["Survey"]
    assert invoices.rows[inv.invoice_id].total_amount == Decimal("55.00")

    with pytest.raises(NotFoundError):
        service.remove_item(admin(), inv.invoice_id, 5)


def test_update_replaces_items_and_recalculates():
    service = _service()
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    updated = service.update_invoice(
        admin(),
        inv.invoice_id,
        InvoiceDraft(client_name="Acme Holdings", tax_rate="0", items=(SURVEY,), status=InvoiceStatus.SENT),
    )

    assert updated.client_name == "Acme Holdings"
    assert updated.status == InvoiceStatus.SENT
    assert updated.total_amount == Decimal("50.00")
    assert updated.issue_date == inv.issue_date


def test_update_without_items_keeps_them():
    service = _service()
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    updated = service.update_invoice(admin(), inv.invoice_id, InvoiceDraft(client_name="Acme", tax_rate="20"))

    assert len(updated.items) == 2
    assert updated.total_amount == Decimal("300.00")


def test_update_with_project_sets_and_clears_project():
    projects = InMemoryProjects(projects={5: Project(project_id=5, organization_id=ORG_ID, name="Villa")})
    service = _service(projects=projects)
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    with_project = service.update_invoice_with_project(admin(), inv.invoice_id, _draft(), project_id=5)
    cleared = service.update_invoice_with_project(admin(), inv.invoice_id, _draft())

    assert with_project.project_id == 5
    assert cleared.project_id is None


def test_update_status_parses_value():
    service = _service()
    inv = service.create_invoice(admin(), _draft(), now=NOW)

    assert service.update_status(admin(), inv.invoice_id, "viewed").status == InvoiceStatus.VIEWED
    with pytest.raises(ValidationError):
        service.update_status(admin(), inv.invoice_id, "lost")


def test_list_filters_and_overdue():
    service = _service()
    service.create_invoice(admin(), _draft(client_name="Acme Ltd", status=InvoiceStatus.SENT), now=NOW)
    service.create_invoice(admin(), _draft(client_name="Beta Corp"), now=NOW)
    paid = service.create_invoice(admin(), _draft(client_name="Acme East"), now=NOW)
    service.record_payment(admin(), paid.invoice_id, "275")

    assert len(service.list_invoices(admin(), search="acme")) == 2
    assert len(service.list_invoices(admin(), status="sent")) == 1
    assert len(service.list_overdue(admin(), today=date(2025, 4, 15))) == 2
    assert service.list_overdue(admin(), today=date(2025, 3, 31)) == []


def test_statistics():
    service = _service()
    service.create_invoice(admin(), _draft(status=InvoiceStatus.SENT), now=NOW)
    service.create_invoice(admin(), _draft(), now=NOW)
    paid = service.create_invoice(admin(), _draft(), now=NOW)
    service.record_payment(admin(), paid.invoice_id, "275")

    stats = service.statistics(admin(), today=date(2025, 4, 15))

    assert stats.total_invoices == 3
    assert stats.draft_invoices == 1
    assert stats.paid_invoices == 1
    assert stats.overdue_invoices == 2
    assert stats.total_outstanding == Decimal("550.00")
    assert stats.yearly_revenue == Decimal("275.00")


def test_build_item_from_payload():
    item = build_item({"description": "Site visit", "unit_price": "120", "quantity": "2", "item_type": "expense"})

    assert item.amount == Decimal("240.00")
    assert item.item_type == InvoiceItemType.EXPENSE
    assert build_item({"description": "Fee", "unit_price": "10"}).quantity == Decimal("1")

    with pytest.raises(ValidationError):
        build_item({"description": "Fee"})
    with pytest.raises(ValidationError):
        build_item({"description": "Fee", "unit_price": "10", "quantity": "x"}, policy=ParseErrorPolicy.REJECT)
    with pytest.raises(ValidationError):
        build_item({"description": "Fee", "unit_price": "Infinity"})


def test_send_invoice_to_client():
    notifier = FakeNotifier()
    service = _service(renderer=FakeRenderer(), notifier=notifier)
    inv = service.create_invoice(admin(), _draft(client_email="billing@acme.test"), now=NOW)

    service.send_invoice(admin(), inv.invoice_id)

    assert notifier.sent == [("billing@acme.test", "DEMO-2025-001", b"%PDF invoice DEMO-2025-001")]
