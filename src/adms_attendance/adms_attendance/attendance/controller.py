from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..common.web import (
    current_operator,
    domain_error_response,
    json_ok,
    normalized_args,
    operator_required,
    unexpected_error_response,
)
from ..core.enums import Jabatan
from ..core.exceptions import DomainError
from ..container import Container
from .service import build_filter


def register(app: Flask, container: Container) -> None:
    def _list(jabatan: Optional[Jabatan] = None):
        args = normalized_args(request.args)
        try:
            page = container.attendance_service.list_records(
                build_filter(args, jabatan=jabatan),
                page=args.get("page"),
                per_page=args.get("per_page") or args.get("limit"),
                order_by=args.get("order_by"),
                direction=args.get("direction"),
                actor=current_operator(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok([r.to_dict() for r in page.items], pagination=page.pagination())

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @operator_required
    def attendance_list():
        return _list()

    @app.route("/api/attendance/dosen", methods=["GET"], endpoint="attendance_list_dosen")
    @operator_required
    def attendance_list_dosen():
        return _list(Jabatan.DOSEN)

    @app.route("/api/attendance/karyawan", methods=["GET"], endpoint="attendance_list_karyawan")
    @operator_required
    def attendance_list_karyawan():
        return _list(Jabatan.KARYAWAN)

    @app.route("/api/attendance/deleted", methods=["GET"], endpoint="attendance_list_deleted")
    @operator_required
    def attendance_list_deleted():
        args = normalized_args(request.args)
        try:
            page = container.attendance_service.list_deleted(
                build_filter(args),
                page=args.get("page"),
                per_page=args.get("per_page") or args.get("limit"),
                actor=current_operator(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok([r.to_dict() for r in page.items], pagination=page.pagination())

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_detail")
    @operator_required
    def attendance_detail(attendance_id: int):
        include_deleted = request.args.get("include_deleted", "").lower() in ("1", "true", "yes")
        try:
            record = container.attendance_service.get_record(attendance_id, include_deleted=include_deleted)
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(record.to_dict())

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @operator_required
    def attendance_delete(attendance_id: int):
        try:
            record = container.attendance_service.soft_delete(attendance_id, actor=current_operator())
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(record.to_dict(), message="Attendance record deleted")
