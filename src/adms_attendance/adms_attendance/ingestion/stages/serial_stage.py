from __future__ import annotations

from ...core.exceptions import AuthenticationError
from .base import GuardContext, GuardStage


class SerialNumberStage(GuardStage):
    """Presented serial must equal the registry serial for the resolved device.

    A correct key with a wrong serial points at a cloned or misconfigured unit.
    """

    name = "serial"

    def __init__(self, *, required: bool = False):
        self._required = required

    def check(self, ctx: GuardContext) -> None:
        if ctx.device is None:
            raise AuthenticationError("serial_check_without_device")

        if ctx.credentials.sn is None:
            if self._required:
                raise AuthenticationError("missing_serial_number")
            return

        if ctx.credentials.sn != ctx.device.serial_number:
            raise AuthenticationError("serial_mismatch")
