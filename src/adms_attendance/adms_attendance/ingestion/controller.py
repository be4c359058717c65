from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc
from ..common.web import client_ip, domain_error_response, json_ok, unexpected_error_response
from ..core.constants import SERVICE_NAME
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/adms/push", methods=["POST"], endpoint="adms_push")
    def adms_push():
        payload = request.get_json(silent=True)
        try:
            result = container.ingestion_service.push(
                payload,
                source_ip=client_ip(),
                header_api_key=request.headers.get("X-API-Key"),
                header_timestamp=request.headers.get("X-Timestamp"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(result.to_dict(), status=201, message="Attendance recorded")

    @app.route("/adms/health", methods=["GET"], endpoint="adms_health")
    def adms_health():
        return jsonify({"status": "ok", "service": SERVICE_NAME, "timestamp": now_utc().isoformat()}), 200

    @app.route("/adms/device/status", methods=["GET"], endpoint="adms_device_status")
    def adms_device_status():
        try:
            data = container.ingestion_service.device_status(
                request.args,
                source_ip=client_ip(),
                header_api_key=request.headers.get("X-API-Key"),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(data)
