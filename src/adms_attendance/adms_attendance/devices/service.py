from __future__ import annotations

import ipaddress
import secrets
from typing import Optional, Sequence

from ..audit.sink import AuditSink, redact_credential
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import API_KEY_BYTES
from ..core.exceptions import NotFoundError, ValidationError
from .model import Device, ProvisionedDevice
from .repository import DeviceRepository


class DeviceService:
    """Administrator-side device lifecycle: provision, list, deactivate.

    Devices are never deleted; deactivation removes their ability to push.
    """

    def __init__(self, devices: DeviceRepository, audit: AuditSink):
        self._devices = devices
        self._audit = audit

    def list_devices(self) -> Sequence[Device]:
        return self._devices.list_all()

    def provision(
        self,
        *,
        device_id: str,
        serial_number: str,
        ip_address: str,
        location: Optional[str] = None,
        faculty: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> ProvisionedDevice:
        device_id = require_max_length(require_non_empty(device_id, "device_id"), "device_id", 50)
        serial_number = require_max_length(require_non_empty(serial_number, "serial_number"), "serial_number", 100)
        ip_text = require_non_empty(ip_address, "ip_address")
        try:
            ip_text = str(ipaddress.ip_address(ip_text))
        except ValueError:
            raise ValidationError("Invalid ip_address value")

        api_key = secrets.token_hex(API_KEY_BYTES)
        self._devices.create(
            device_id=device_id,
            serial_number=serial_number,
            ip_address=ip_text,
            api_key=api_key,
            location=(location or "").strip() or None,
            faculty=(faculty or "").strip() or None,
        )
        device = self._devices.find_by_device_id(device_id)
        if device is None:
            raise NotFoundError("Device not found after provisioning")

        self._audit.record(
            "DEVICE_PROVISIONED",
            actor=actor,
            device_id=device_id,
            serial_number=serial_number,
            api_key=redact_credential(api_key),
        )
        return ProvisionedDevice(device=device, api_key=api_key)

    def deactivate(self, device_id: str, *, actor: Optional[str] = None) -> Device:
        device = self._devices.find_by_device_id(device_id)
        if device is None:
            raise NotFoundError("Device not found")

        if device.is_active:
            self._devices.set_active(device_id, is_active=False)
        self._audit.record("DEVICE_DEACTIVATED", actor=actor, device_id=device_id)
        return self._devices.find_by_device_id(device_id) or device
