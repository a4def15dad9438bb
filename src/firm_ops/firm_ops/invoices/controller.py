from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.datetime_utils import now_local
from ..common.http import api_login_required, current_actor, json_body, ok, optional_date
from ..common.validators import parse_enum
from ..container import Container
from ..core.enums import InvoiceStatus, ParseErrorPolicy
from ..core.exceptions import ValidationError
from .model import InvoiceDraft
from .service import build_item


def _draft(data: dict, policy: ParseErrorPolicy) -> InvoiceDraft:
    raw_items = data.get("items")
    if raw_items is not None and not isinstance(raw_items, list):
        raise ValidationError("items must be a list")
    return InvoiceDraft(
        client_name=data.get("client_name"),
        client_email=data.get("client_email"),
        client_address=data.get("client_address"),
        client_phone=data.get("client_phone"),
        invoice_number=data.get("invoice_number"),
        issue_date=optional_date(data.get("issue_date")),
        due_date=optional_date(data.get("due_date")),
        status=parse_enum(InvoiceStatus, data["status"], "status") if data.get("status") else None,
        tax_rate=data.get("tax_rate"),
        notes=data.get("notes"),
        terms_and_conditions=data.get("terms_and_conditions"),
        items=tuple(build_item(i, policy=policy) for i in raw_items) if raw_items is not None else None,
    )


def _project_id(data: dict):
    value = data.get("project_id")
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("project_id must be an integer")


def register(app: Flask, container: Container) -> None:
    service = container.invoice_service
    policy = container.parse_policy

    @app.route("/api/invoices", methods=["POST"], endpoint="api_invoice_create")
    @api_login_required
    def create_invoice():
        data = json_body()
        invoice = service.create_invoice(current_actor(), _draft(data, policy), project_id=_project_id(data))
        return ok(invoice.to_dict(), 201)

    @app.route("/api/invoices", methods=["GET"], endpoint="api_invoice_list")
    @api_login_required
    def list_invoices():
        invoices = service.list_invoices(
            current_actor(),
            status=request.args.get("status"),
            search=request.args.get("search"),
        )
        today = now_local().date()
        return ok([inv.to_dict(today=today) for inv in invoices])

    @app.route("/api/invoices/overdue", methods=["GET"], endpoint="api_invoice_overdue")
    @api_login_required
    def list_overdue():
        today = now_local().date()
        return ok([inv.to_dict(today=today) for inv in service.list_overdue(current_actor(), today=today)])

    @app.route("/api/invoices/statistics", methods=["GET"], endpoint="api_invoice_statistics")
    @api_login_required
    def statistics():
        return ok(service.statistics(current_actor()).to_dict())

    @app.route("/api/invoices/<int:invoice_id>", methods=["GET"], endpoint="api_invoice_get")
    @api_login_required
    def get_invoice(invoice_id: int):
        return ok(service.get_invoice(current_actor(), invoice_id).to_dict(today=now_local().date()))

    @app.route("/api/invoices/<int:invoice_id>", methods=["PUT"], endpoint="api_invoice_update")
    @api_login_required
    def update_invoice(invoice_id: int):
        data = json_body()
        actor = current_actor()
        if "project_id" in data:
            invoice = service.update_invoice_with_project(
                actor, invoice_id, _draft(data, policy), project_id=_project_id(data)
            )
        else:
            invoice = service.update_invoice(actor, invoice_id, _draft(data, policy))
        return ok(invoice.to_dict())

    @app.route("/api/invoices/<int:invoice_id>", methods=["DELETE"], endpoint="api_invoice_delete")
    @api_login_required
    def delete_invoice(invoice_id: int):
        service.delete_invoice(current_actor(), invoice_id)
        return ok({"message": "Invoice deleted"})

    @app.route("/api/invoices/<int:invoice_id>/items", methods=["POST"], endpoint="api_invoice_add_item")
    @api_login_required
    def add_item(invoice_id: int):
        invoice = service.add_item(current_actor(), invoice_id, build_item(json_body(), policy=policy))
        return ok(invoice.to_dict(), 201)

    @app.route(
        "/api/invoices/<int:invoice_id>/items/<int:position>",
        methods=["DELETE"],
        endpoint="api_invoice_remove_item",
    )
    @api_login_required
    def remove_item(invoice_id: int, position: int):
        return ok(service.remove_item(current_actor(), invoice_id, position).to_dict())

    @app.route("/api/invoices/<int:invoice_id>/status", methods=["PUT"], endpoint="api_invoice_status")
    @api_login_required
    def update_status(invoice_id: int):
        return ok(service.update_status(current_actor(), invoice_id, json_body().get("status")).to_dict())

    @app.route("/api/invoices/<int:invoice_id>/payment", methods=["POST"], endpoint="api_invoice_payment")
    @api_login_required
    def record_payment(invoice_id: int):
        data = json_body()
        if data.get("amount") in (None, ""):
            raise ValidationError("amount is required")
        invoice = service.record_payment(
            current_actor(),
            invoice_id,
            data["amount"],
            payment_date=optional_date(data.get("payment_date")),
        )
        return ok(invoice.to_dict())

    @app.route("/api/invoices/<int:invoice_id>/download", methods=["GET"], endpoint="api_invoice_download")
    @api_login_required
    def download(invoice_id: int):
        invoice = service.get_invoice(current_actor(), invoice_id)
        return send_file(
            io.BytesIO(service.render_pdf(invoice)),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"{invoice.invoice_number}.pdf",
        )

    @app.route("/api/invoices/<int:invoice_id>/send", methods=["POST"], endpoint="api_invoice_send")
    @api_login_required
    def send(invoice_id: int):
        invoice = service.send_invoice(current_actor(), invoice_id)
        return ok({"message": f"Invoice {invoice.invoice_number} sent"})
