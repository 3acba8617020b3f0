from __future__ import annotations

from flask import Flask, request

from ..common.http import current_actor, ok, request_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.structure_service

    @app.route("/api/salary-structures", methods=["GET"], endpoint="list_salary_structures")
    def list_salary_structures():
        args = request.args
        page = service.list(
            active_only=args.get("isActive", "true").lower() not in ("all", "false"),
            search=args.get("search"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return ok([s.to_dict() for s in page.items], pagination=page.pagination())

    @app.route("/api/salary-structures/summary", methods=["GET"], endpoint="salary_structure_summary")
    def salary_structure_summary():
        return ok(service.summary())

    @app.route("/api/salary-structures/employees/without", methods=["GET"], endpoint="employees_without_structure")
    def employees_without_structure():
        args = request.args
        page = service.employees_without_structure(
            search=args.get("search"),
            page=args.get("page"),
            limit=args.get("limit"),
        )
        return ok([e.to_summary() for e in page.items], pagination=page.pagination())

    @app.route("/api/salary-structures/<int:structure_id>", methods=["GET"], endpoint="get_salary_structure")
    def get_salary_structure(structure_id: int):
        return ok(service.get_by_id(structure_id).to_dict())

    @app.route(
        "/api/salary-structures/employee/<employee_id>",
        methods=["GET"],
        endpoint="get_employee_salary_structure",
    )
    def get_employee_salary_structure(employee_id: str):
        return ok(service.get_active_for_employee(employee_id).to_dict())

    @app.route(
        "/api/salary-structures/employee/<employee_id>/history",
        methods=["GET"],
        endpoint="salary_structure_history",
    )
    def salary_structure_history(employee_id: str):
        page = service.history(employee_id, page=request.args.get("page"), limit=request.args.get("limit"))
        return ok([s.to_dict() for s in page.items], pagination=page.pagination())

    @app.route(
        "/api/salary-structures/employee/<employee_id>/breakdown",
        methods=["GET"],
        endpoint="salary_breakdown",
    )
    def salary_breakdown(employee_id: str):
        return ok(service.breakdown(employee_id))

    @app.route("/api/salary-structures", methods=["POST"], endpoint="create_salary_structure")
    def create_salary_structure():
        structure = service.create(request_json(), actor=current_actor())
        return ok(structure.to_dict(), status=201, message="Salary structure created successfully")

    @app.route("/api/salary-structures/<int:structure_id>", methods=["PUT"], endpoint="update_salary_structure")
    def update_salary_structure(structure_id: int):
        structure = service.update(structure_id, request_json(), actor=current_actor())
        return ok(structure.to_dict(), message="Salary structure updated successfully")

    @app.route(
        "/api/salary-structures/<int:structure_id>/deactivate",
        methods=["PATCH"],
        endpoint="deactivate_salary_structure",
    )
    def deactivate_salary_structure(structure_id: int):
        structure = service.deactivate(structure_id, actor=current_actor())
        return ok(structure.to_dict(), message="Salary structure deactivated successfully")

    @app.route("/api/salary-structures/<int:structure_id>", methods=["DELETE"], endpoint="delete_salary_structure")
    def delete_salary_structure(structure_id: int):
        service.delete(structure_id, actor=current_actor())
        return ok({"id": structure_id}, message="Salary structure deleted successfully")
