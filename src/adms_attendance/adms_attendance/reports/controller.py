from __future__ import annotations

from flask import Flask, request

from ..common.web import (
    current_operator,
    domain_error_response,
    json_ok,
    normalized_args,
    operator_required,
    unexpected_error_response,
)
from ..core.exceptions import DomainError
from ..container import Container
from ..exports.factory import parse_format
from ..exports.service import RECORD_COLUMNS, SUMMARY_COLUMNS, ExportFile, record_rows, summary_rows


def register(app: Flask, container: Container) -> None:
    def _send(export: ExportFile):
        return app.response_class(
            export.content,
            mimetype=export.mimetype,
            headers={"Content-Disposition": f"attachment; filename={export.filename}"},
        )

    def _suffix(period) -> str:
        suffix = f"{period.year}_{period.month:02d}"
        if period.category:
            suffix += f"_{period.category.value.lower()}"
        return suffix

    @app.route("/api/attendance/rekap", methods=["GET"], endpoint="attendance_summary")
    @operator_required
    def attendance_summary():
        args = normalized_args(request.args)
        try:
            summary = container.report_service.monthly_summary(
                args.get("month"),
                args.get("year"),
                category=args.get("category"),
                user_id=args.get("user_id"),
                actor=current_operator(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(summary.to_dict())

    @app.route("/api/attendance/rekap/bulanan", methods=["GET"], endpoint="attendance_monthly_report")
    @operator_required
    def attendance_monthly_report():
        args = normalized_args(request.args)
        try:
            report = container.report_service.monthly_report(
                args.get("month"),
                args.get("year"),
                category=args.get("category"),
                user_id=args.get("user_id"),
                actor=current_operator(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(report.to_dict())

    @app.route("/api/dashboard/summary", methods=["GET"], endpoint="dashboard_summary")
    @operator_required
    def dashboard_summary():
        args = normalized_args(request.args)
        try:
            period, summary = container.report_service.dashboard(
                args.get("month"), args.get("year"), actor=current_operator()
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok({"period": period.to_dict(), **summary.to_dict()})

    @app.route("/api/export/<fmt>", methods=["GET"], endpoint="export_records")
    @operator_required
    def export_records(fmt: str):
        args = normalized_args(request.args)
        try:
            export_format = parse_format(fmt)
            period, events = container.report_service.records(
                args.get("month"), args.get("year"), category=args.get("category")
            )
            export = container.export_service.render(
                record_rows(events),
                export_format,
                title=f"Data Absensi {period.month:02d}/{period.year}",
                basename=f"absensi_{_suffix(period)}",
                columns=RECORD_COLUMNS,
            )
            container.audit.record(
                f"EXPORT_{export_format.name}",
                actor=current_operator(),
                kind="records",
                month=period.month,
                year=period.year,
                category=period.category,
                rows=len(events),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return _send(export)

    @app.route("/api/export/<fmt>/rekap", methods=["GET"], endpoint="export_summary")
    @operator_required
    def export_summary(fmt: str):
        args = normalized_args(request.args)
        try:
            export_format = parse_format(fmt)
            summary = container.report_service.monthly_summary(
                args.get("month"),
                args.get("year"),
                category=args.get("category"),
                actor=current_operator(),
            )
            period = summary.period
            export = container.export_service.render(
                summary_rows(summary.rows),
                export_format,
                title=f"Rekap Absensi {period.month:02d}/{period.year}",
                basename=f"rekap_absensi_{_suffix(period)}",
                columns=SUMMARY_COLUMNS,
            )
            container.audit.record(
                f"EXPORT_{export_format.name}",
                actor=current_operator(),
                kind="summary",
                month=period.month,
                year=period.year,
                category=period.category,
                rows=len(summary.rows),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return _send(export)
