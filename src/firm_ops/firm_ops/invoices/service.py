from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.money import parse_optional_decimal, to_decimal
from ..common.validators import optional_text, parse_enum, require_non_empty
from ..core.constants import DEFAULT_INVOICE_DUE_DAYS
from ..core.enums import InvoiceItemType, InvoiceStatus, ParseErrorPolicy
from ..core.exceptions import AuthorizationError, ConfigurationError, ConflictError, NotFoundError, ValidationError
from ..documents.gateways import DocumentRenderer, NotificationGateway
from ..employees.model import Actor
from ..employees.repository import EmployeeRepository
from ..organizations.model import Organization, Project
from ..organizations.repository import OrganizationRepository, ProjectRepository
from .model import Invoice, InvoiceDraft, InvoiceItem, InvoiceStatistics
from .numbering import format_invoice_number, invoice_prefix
from .repository import InvoiceRepository

logger = logging.getLogger(__name__)


def build_item(payload: dict, *, policy: ParseErrorPolicy = ParseErrorPolicy.ZERO) -> InvoiceItem:
    """Turn a raw item mapping (e.g. request JSON) into an InvoiceItem."""
    description = require_non_empty(str(payload.get("description") or ""), "Item description")
    if payload.get("unit_price") in (None, ""):
        raise ValidationError("Item unit price is required")
    item_type = payload.get("item_type")
    return InvoiceItem(
        description=description,
        unit_price=to_decimal(payload["unit_price"]),
        quantity=parse_optional_decimal(payload.get("quantity"), "quantity", policy=policy, default=Decimal("1")),
        item_type=parse_enum(InvoiceItemType, item_type, "item type") if item_type else InvoiceItemType.FIXED_PRICE,
        time_log_reference=optional_text(payload.get("time_log_reference")),
    )


class InvoiceService:
    """Invoice ledger: numbering, line items, totals, payment and deletion rules."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        organizations: OrganizationRepository,
        employees: EmployeeRepository,
        projects: ProjectRepository,
        *,
        parse_policy: ParseErrorPolicy = ParseErrorPolicy.ZERO,
        due_days: int = DEFAULT_INVOICE_DUE_DAYS,
        renderer: Optional[DocumentRenderer] = None,
        notifier: Optional[NotificationGateway] = None,
    ):
        self._invoices = invoices
        self._organizations = organizations
        self._employees = employees
        self._projects = projects
        self._parse_policy = parse_policy
        self._due_days = int(due_days)
        self._renderer = renderer
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Create / read
    # ------------------------------------------------------------------
    def create_invoice(
        self,
        actor: Actor,
        draft: InvoiceDraft,
        *,
        project_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> Invoice:
        self._require_admin(actor)
        now = now or now_local()
        logger.info("Creating new invoice for organization %s", actor.organization_id)

        organization = self._organization(actor)
        creator = self._employees.get_by_id(actor.user_id)
        if not creator or creator.organization_id != organization.organization_id:
            raise NotFoundError("Creator not found")

        client_name = optional_text(draft.client_name)
        project = self._project(actor, project_id) if project_id is not None else None
        if project and not client_name:
            client_name = optional_text(project.client_name)
        client_name = require_non_empty(client_name or "", "Client name")

        invoice_number = optional_text(draft.invoice_number) or self._next_invoice_number(organization, now.date())
        issue_date = draft.issue_date or now.date()
        due_date = draft.due_date or issue_date + timedelta(days=self._due_days)

        invoice = Invoice(
            organization_id=organization.organization_id,
            invoice_number=invoice_number,
            client_name=client_name,
            issue_date=issue_date,
            due_date=due_date,
            project_id=project.project_id if project else None,
            created_by=creator.employee_id,
            client_email=optional_text(draft.client_email),
            client_address=optional_text(draft.client_address),
            client_phone=optional_text(draft.client_phone),
            status=draft.status or InvoiceStatus.DRAFT,
            tax_rate=self._tax_rate(draft.tax_rate),
            notes=optional_text(draft.notes),
            terms_and_conditions=optional_text(draft.terms_and_conditions),
            items=list(draft.items or ()),
            created_at=now,
            updated_at=now,
        ).recalculate()

        invoice.invoice_id = self._invoices.create(invoice)
        logger.info("Invoice created with ID %s and number %s", invoice.invoice_id, invoice.invoice_number)
        return invoice

    def _next_invoice_number(self, organization: Organization, today: date) -> str:
        prefix = invoice_prefix(organization.name, today.year)
        return format_invoice_number(prefix, self._invoices.next_sequence(organization.organization_id, prefix))

    def get_invoice(self, actor: Actor, invoice_id: int) -> Invoice:
        self._require_admin(actor)
        self._organization(actor)
        invoice = self._invoices.get_by_id_and_organization(invoice_id, actor.organization_id)
        if not invoice:
            raise NotFoundError("Invoice not found")
        return invoice

    def list_invoices(
        self,
        actor: Actor,
        *,
        status: Any = None,
        search: Optional[str] = None,
    ) -> Sequence[Invoice]:
        self._require_admin(actor)
        self._organization(actor)
        return self._invoices.list_by_organization(
            actor.organization_id,
            status=parse_enum(InvoiceStatus, status, "status") if optional_text(status) else None,
            client_search=optional_text(search),
        )

    def list_overdue(self, actor: Actor, *, today: date | None = None) -> Sequence[Invoice]:
        self._require_admin(actor)
        self._organization(actor)
        return self._invoices.list_overdue(actor.organization_id, today=today or now_local().date())

    def statistics(self, actor: Actor, *, today: date | None = None) -> InvoiceStatistics:
        today = today or now_local().date()
        overdue = self.list_overdue(actor, today=today)
        org_id = actor.organization_id
        return InvoiceStatistics(
            total_invoices=self._invoices.count_by_status(org_id),
            draft_invoices=self._invoices.count_by_status(org_id, status=InvoiceStatus.DRAFT),
            paid_invoices=self._invoices.count_by_status(org_id, status=InvoiceStatus.PAID),
            overdue_invoices=len(overdue),
            total_outstanding=self._invoices.total_outstanding(org_id),
            yearly_revenue=self._invoices.revenue_between(
                org_id, start=date(today.year, 1, 1), end=date(today.year, 12, 31)
            ),
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    def add_item(self, actor: Actor, invoice_id: int, item: InvoiceItem, *, now: datetime | None = None) -> Invoice:
        invoice = self.get_invoice(actor, invoice_id)
        position = invoice.add_item(item)
        self._save(invoice, now)
        logger.info("Item %s added to invoice %s", position, invoice.invoice_number)
        return invoice

    def remove_item(self, actor: Actor, invoice_id: int, position: int, *, now: datetime | None = None) -> Invoice:
        invoice = self.get_invoice(actor, invoice_id)
        if not 0 <= int(position) < len(invoice.items):
            raise NotFoundError("Invoice item not found")
        invoice.remove_item(int(position))
        self._save(invoice, now)
        logger.info("Item %s removed from invoice %s", position, invoice.invoice_number)
        return invoice

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------
    def update_invoice(self, actor: Actor, invoice_id: int, draft: InvoiceDraft, *, now: datetime | None = None) -> Invoice:
        invoice = self.get_invoice(actor, invoice_id)
        self._apply(invoice, draft)
        self._save(invoice, now)
        logger.info("Invoice updated: %s", invoice.invoice_number)
        return invoice

    def update_invoice_with_project(
        self,
        actor: Actor,
        invoice_id: int,
        draft: InvoiceDraft,
        *,
        project_id: Optional[int] = None,
        now: datetime | None = None,
    ) -> Invoice:
        """Like update_invoice, but also sets the project; no project id clears it."""
        invoice = self.get_invoice(actor, invoice_id)
        self._apply(invoice, draft)
        invoice.project_id = self._project(actor, project_id).project_id if project_id is not None else None
        self._save(invoice, now)
        logger.info("Invoice updated with project %s: %s", invoice.project_id, invoice.invoice_number)
        return invoice

    def update_status(self, actor: Actor, invoice_id: int, status: Any, *, now: datetime | None = None) -> Invoice:
        invoice = self.get_invoice(actor, invoice_id)
        invoice.status = parse_enum(InvoiceStatus, status, "status")
        self._save(invoice, now)
        logger.info("Invoice %s status updated to %s", invoice.invoice_number, invoice.status.value)
        return invoice

    def record_payment(
        self,
        actor: Actor,
        invoice_id: int,
        amount: Any,
        *,
        payment_date: date | None = None,
        now: datetime | None = None,
    ) -> Invoice:
        """Full payment only: the amount must equal the invoice total."""
        invoice = self.get_invoice(actor, invoice_id)
        paid = to_decimal(amount)
        if paid != invoice.total_amount:
            raise ValidationError(
                f"Payment must be for the full invoice amount. Expected: {invoice.total_amount}, Received: {paid}"
            )
        if invoice.status == InvoiceStatus.PAID:
            raise ConflictError("Invoice is already paid")

        now = now or now_local()
        invoice.paid_amount = invoice.total_amount
        invoice.last_payment_date = payment_date or now.date()
        invoice.status = InvoiceStatus.PAID
        self._save(invoice, now)
        logger.info("Full payment of %s recorded for invoice %s", paid, invoice.invoice_number)
        return invoice

    def delete_invoice(self, actor: Actor, invoice_id: int) -> None:
        invoice = self.get_invoice(actor, invoice_id)
        if invoice.status != InvoiceStatus.DRAFT:
            raise ConflictError("Only draft invoices can be deleted")
        self._invoices.delete(invoice.invoice_id)
        logger.info("Invoice deleted: %s", invoice.invoice_number)

    def _apply(self, invoice: Invoice, draft: InvoiceDraft) -> None:
        invoice.client_name = require_non_empty(draft.client_name or "", "Client name")
        invoice.client_email = optional_text(draft.client_email)
        invoice.client_address = optional_text(draft.client_address)
        invoice.client_phone = optional_text(draft.client_phone)
        if draft.issue_date:
            invoice.issue_date = draft.issue_date
        if draft.due_date:
            invoice.due_date = draft.due_date
        invoice.tax_rate = self._tax_rate(draft.tax_rate)
        invoice.notes = optional_text(draft.notes)
        invoice.terms_and_conditions = optional_text(draft.terms_and_conditions)
        if draft.status is not None:
            invoice.status = draft.status
        if draft.items is not None:
            invoice.items = list(draft.items)

    def _save(self, invoice: Invoice, now: datetime | None) -> None:
        invoice.recalculate()
        invoice.updated_at = now or now_local()
        self._invoices.update(invoice)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    def render_pdf(self, invoice: Invoice) -> bytes:
        if self._renderer is None:
            raise ConfigurationError("PDF rendering is not configured")
        return self._renderer.render_invoice(invoice)

    def send_invoice(self, actor: Actor, invoice_id: int) -> Invoice:
        if self._notifier is None:
            raise ConfigurationError("Email delivery is not configured")
        invoice = self.get_invoice(actor, invoice_id)
        if not invoice.client_email:
            raise ValidationError("Invoice has no client email")
        self._notifier.send_invoice(to_email=invoice.client_email, invoice=invoice, pdf=self.render_pdf(invoice))
        logger.info("Invoice %s sent to %s", invoice.invoice_number, invoice.client_email)
        return invoice

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def _tax_rate(self, value: Any) -> Decimal:
        return parse_optional_decimal(value, "tax rate", policy=self._parse_policy)

    def _organization(self, actor: Actor) -> Organization:
        organization = self._organizations.get_by_id(actor.organization_id)
        if not organization:
            raise NotFoundError("Organization not found")
        return organization

    def _project(self, actor: Actor, project_id: int) -> Project:
        project = self._projects.get_by_id(project_id)
        if not project or project.organization_id != actor.organization_id:
            raise NotFoundError("Project not found")
        return project

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Only administrators can manage invoices")
