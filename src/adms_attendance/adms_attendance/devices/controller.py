from __future__ import annotations

from flask import Flask, request

from ..common.web import (
    current_operator,
    domain_error_response,
    json_ok,
    operator_required,
    unexpected_error_response,
)
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/devices", methods=["GET"], endpoint="devices_list")
    @operator_required
    def devices_list():
        try:
            devices = container.device_service.list_devices()
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok([d.public_view() for d in devices])

    @app.route("/api/devices", methods=["POST"], endpoint="devices_provision")
    @operator_required
    def devices_provision():
        data = request.get_json(silent=True) or {}
        try:
            provisioned = container.device_service.provision(
                device_id=data.get("device_id"),
                serial_number=data.get("serial_number"),
                ip_address=data.get("ip_address"),
                location=data.get("location"),
                faculty=data.get("faculty"),
                actor=current_operator(),
            )
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        # The key is shown once; it is never returned by any listing.
        return json_ok(
            {**provisioned.device.public_view(), "api_key": provisioned.api_key},
            status=201,
            message="Device provisioned",
        )

    @app.route("/api/devices/<device_id>/deactivate", methods=["POST"], endpoint="devices_deactivate")
    @operator_required
    def devices_deactivate(device_id: str):
        try:
            device = container.device_service.deactivate(device_id, actor=current_operator())
        except DomainError as e:
            return domain_error_response(e)
        except Exception as e:
            return unexpected_error_response(e)
        return json_ok(device.public_view(), message="Device deactivated")
