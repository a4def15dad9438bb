from __future__ import annotations

import io
from datetime import date

from flask import Flask, request, send_file

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import api_login_required, current_actor, json_body, ok, optional_date
from ..common.validators import parse_enum
from ..container import Container
from ..core.enums import PayslipStatus
from ..core.exceptions import ValidationError
from ..employees.model import Actor
from .model import PayslipRequest


def _payslip_request(actor: Actor, data: dict) -> PayslipRequest:
    if not data.get("employee_id"):
        raise ValidationError("employee_id is required")
    try:
        employee_id = int(data["employee_id"])
        organization_id = int(data.get("organization_id") or actor.organization_id)
    except (TypeError, ValueError):
        raise ValidationError("employee_id and organization_id must be integers")
    return PayslipRequest(
        employee_id=employee_id,
        organization_id=organization_id,
        pay_period_start=parse_iso_date(data.get("pay_period_start")),
        pay_period_end=parse_iso_date(data.get("pay_period_end")),
        monthly_salary=data.get("monthly_salary"),
        allowances=data.get("allowances"),
        bonuses=data.get("bonuses"),
        other_deductions=data.get("other_deductions"),
        overtime_rate=data.get("overtime_rate"),
        tax_rate=data.get("tax_rate"),
        insurance_deduction=data.get("insurance_deduction"),
        notes=data.get("notes"),
    )


def _status_filter():
    value = request.args.get("status")
    return parse_enum(PayslipStatus, value, "status") if value else None


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payslips/generate", methods=["POST"], endpoint="api_payslip_generate")
    @api_login_required
    def generate():
        actor = current_actor()
        payslip = service.generate(actor, _payslip_request(actor, json_body()))
        return ok(payslip.to_dict(), 201)

    @app.route("/api/payslips/preview", methods=["POST"], endpoint="api_payslip_preview")
    @api_login_required
    def preview():
        actor = current_actor()
        payslip = service.generate_preview(actor, _payslip_request(actor, json_body()))
        if request.args.get("format") == "pdf":
            return send_file(
                io.BytesIO(service.render_pdf(payslip)),
                mimetype="application/pdf",
                as_attachment=True,
                download_name=f"{payslip.payslip_number}.pdf",
            )
        return ok(payslip.to_dict())

    @app.route("/api/payslips", methods=["GET"], endpoint="api_payslip_list")
    @api_login_required
    def list_payslips():
        payslips = service.list_for_organization(current_actor(), status=_status_filter())
        return ok([p.to_dict() for p in payslips])

    @app.route("/api/payslips/employee/<int:employee_id>", methods=["GET"], endpoint="api_payslip_list_employee")
    @api_login_required
    def list_for_employee(employee_id: int):
        payslips = service.list_for_employee(current_actor(), employee_id, status=_status_filter())
        return ok([p.to_dict() for p in payslips])

    @app.route("/api/payslips/<int:payslip_id>", methods=["GET"], endpoint="api_payslip_get")
    @api_login_required
    def get_payslip(payslip_id: int):
        return ok(service.get_payslip(current_actor(), payslip_id).to_dict())

    @app.route("/api/payslips/<int:payslip_id>", methods=["PUT"], endpoint="api_payslip_update")
    @api_login_required
    def update_payslip(payslip_id: int):
        payslip = service.update_payslip(current_actor(), payslip_id, json_body())
        return ok(payslip.to_dict())

    @app.route("/api/payslips/<int:payslip_id>", methods=["DELETE"], endpoint="api_payslip_delete")
    @api_login_required
    def delete_payslip(payslip_id: int):
        service.delete_payslip(current_actor(), payslip_id)
        return ok({"message": "Payslip deleted"})

    @app.route("/api/payslips/<int:payslip_id>/status", methods=["PUT"], endpoint="api_payslip_status")
    @api_login_required
    def update_status(payslip_id: int):
        status = parse_enum(PayslipStatus, json_body().get("status"), "status")
        return ok(service.update_status(current_actor(), payslip_id, status).to_dict())

    @app.route("/api/payslips/<int:payslip_id>/download", methods=["GET"], endpoint="api_payslip_download")
    @api_login_required
    def download(payslip_id: int):
        payslip = service.get_payslip(current_actor(), payslip_id)
        return send_file(
            io.BytesIO(service.render_pdf(payslip)),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"{payslip.payslip_number}.pdf",
        )

    @app.route("/api/payslips/<int:payslip_id>/send", methods=["POST"], endpoint="api_payslip_send")
    @api_login_required
    def send(payslip_id: int):
        payslip = service.send_payslip(current_actor(), payslip_id)
        return ok({"message": f"Payslip {payslip.payslip_number} sent"})

    @app.route("/api/payslips/statistics", methods=["GET"], endpoint="api_payslip_statistics")
    @api_login_required
    def statistics():
        year = now_local().year
        start = optional_date(request.args.get("start")) or date(year, 1, 1)
        end = optional_date(request.args.get("end")) or date(year, 12, 31)
        return ok(service.statistics(current_actor(), start=start, end=end).to_dict())
