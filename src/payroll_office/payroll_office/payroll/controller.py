from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, ok, request_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll", methods=["GET"], endpoint="list_payroll")
    def list_payroll():
        args = request.args
        listing = container.payroll_service.list(
            month=args.get("month"),
            status=args.get("status"),
            payment_status=args.get("paymentStatus"),
            department=args.get("department"),
            search=args.get("search"),
            page=args.get("page"),
            limit=args.get("limit"),
            sort_by=args.get("sortBy"),
            sort_order=args.get("sortOrder"),
        )
        return ok(
            [p.to_dict() for p in listing.page.items],
            summary=listing.summary,
            pagination=listing.page.pagination(),
        )

    @app.route("/api/payroll/summary", methods=["GET"], endpoint="payroll_summary")
    def payroll_summary():
        return ok(container.payroll_service.summary(month=request.args.get("month")))

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="get_payroll")
    def get_payroll(payroll_id: int):
        return ok(container.payroll_service.get_by_id(payroll_id).to_dict())

    @app.route(
        "/api/payroll/employee/<employee_id>/month/<month>",
        methods=["GET"],
        endpoint="get_payroll_by_employee_month",
    )
    def get_payroll_by_employee_month(employee_id: str, month: str):
        payroll = container.payroll_service.get_by_employee_and_month(employee_id, month)
        if not payroll:
            return ok(None, message="Payroll not found")
        return ok(payroll.to_dict())

    @app.route("/api/payroll/process", methods=["POST"], endpoint="process_payroll")
    def process_payroll():
        body = request_json()
        processed = container.payroll_service.process(
            employee_id=body.get("employeeId"),
            month=body.get("month"),
            attendance=container.payroll_service.attendance_from_payload(body),
            actor=current_actor(),
        )
        return ok(
            {**processed.payroll.to_dict(), "calculation": processed.calculation.to_dict()},
            status=201,
            message="Payroll processed successfully",
        )

    @app.route("/api/payroll/bulk-process", methods=["POST"], endpoint="bulk_process_payroll")
    def bulk_process_payroll():
        body = request_json()
        outcome = container.bulk_runner.run(
            month=body.get("month"),
            employee_ids=body.get("employeeIds"),
            attendance_map=body.get("attendanceMap"),
            actor=current_actor(),
        )
        summary = outcome.summary
        return ok(
            outcome.to_dict(),
            message=f"Processed {summary['processed']} payroll records, {summary['failed']} failed",
        )

    @app.route("/api/payroll/<int:payroll_id>/payment-status", methods=["PUT"], endpoint="update_payment_status")
    def update_payment_status(payroll_id: int):
        body = request_json()
        update = container.payment_manager.update_payment_status(
            payroll_id,
            status=body.get("paymentStatus") or body.get("status"),
            paid_amount=body.get("paidAmount"),
            payment_date=body.get("paymentDate"),
            notes=body.get("notes"),
            actor=current_actor(),
        )
        return ok(update.to_dict(), message="Payment status updated successfully")

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="delete_payroll")
    def delete_payroll(payroll_id: int):
        container.payroll_service.delete(payroll_id, actor=current_actor())
        return ok({"id": payroll_id}, message="Payroll deleted successfully")
