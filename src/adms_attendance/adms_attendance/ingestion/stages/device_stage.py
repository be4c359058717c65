from __future__ import annotations

import hmac

from ...core.exceptions import AuthenticationError
from ...devices.repository import DeviceRepository
from .base import GuardContext, GuardStage


class DeviceAuthStage(GuardStage):
    """Resolve the device by its API key; it must be active and match device_id.

    Unknown key, inactive device and device_id mismatch all fail with the same
    public message.
    """

    name = "device"

    def __init__(self, devices: DeviceRepository):
        self._devices = devices

    def check(self, ctx: GuardContext) -> None:
        device = self._devices.find_active_by_credential(ctx.credentials.api_key)
        if device is None:
            raise AuthenticationError("unknown_or_inactive_device")

        claimed = ctx.credentials.device_id
        if claimed is not None and not hmac.compare_digest(device.device_id.encode("utf-8"), claimed.encode("utf-8")):
            raise AuthenticationError("device_id_mismatch")

        ctx.device = device
