from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List

from ..core.constants import DEFAULT_REPLAY_TOLERANCE_SECONDS
from ..devices.repository import DeviceRepository
from .stages.base import GuardStage
from .stages.device_stage import DeviceAuthStage
from .stages.origin_stage import OriginStage
from .stages.replay_stage import ReplayWindowStage
from .stages.serial_stage import SerialNumberStage
from .stages.signature_stage import SignatureStage


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


@dataclass(frozen=True)
class IngestionSettings:
    """ADMS security knobs read from the active settings module."""

    ip_whitelist_enabled: bool = False
    allowed_ips: tuple[str, ...] = field(default_factory=tuple)
    allow_loopback: bool = False
    replay_tolerance_seconds: int = DEFAULT_REPLAY_TOLERANCE_SECONDS
    require_timestamp: bool = False
    require_serial: bool = False
    require_signature: bool = False

    @classmethod
    def from_settings(cls, settings: Any) -> "IngestionSettings":
        return cls(
            ip_whitelist_enabled=bool(getattr(settings, "ADMS_IP_WHITELIST_ENABLED", False)),
            allowed_ips=tuple(_as_list(getattr(settings, "ADMS_ALLOWED_IPS", ()))),
            allow_loopback=bool(getattr(settings, "ADMS_ALLOW_LOOPBACK", False)),
            replay_tolerance_seconds=int(
                getattr(settings, "ADMS_REPLAY_TOLERANCE_SECONDS", DEFAULT_REPLAY_TOLERANCE_SECONDS)
            ),
            require_timestamp=bool(getattr(settings, "ADMS_REQUIRE_TIMESTAMP", False)),
            require_serial=bool(getattr(settings, "ADMS_REQUIRE_SERIAL", False)),
            require_signature=bool(getattr(settings, "ADMS_REQUIRE_SIGNATURE", False)),
        )


@dataclass
class GuardFactory:
    """Factory Pattern: assemble the ordered guard stages from settings.

    Order matters: later stages rely on the device resolved by earlier ones.
    """

    settings: IngestionSettings
    devices: DeviceRepository

    def _origin(self) -> List[GuardStage]:
        if not self.settings.ip_whitelist_enabled:
            return []
        return [OriginStage(self.settings.allowed_ips, allow_loopback=self.settings.allow_loopback)]

    def for_push(self) -> List[GuardStage]:
        return [
            *self._origin(),
            DeviceAuthStage(self.devices),
            SerialNumberStage(required=self.settings.require_serial),
            ReplayWindowStage(
                tolerance_seconds=self.settings.replay_tolerance_seconds,
                required=self.settings.require_timestamp,
            ),
            SignatureStage(required=self.settings.require_signature),
        ]

    def for_status(self) -> List[GuardStage]:
        return [*self._origin(), DeviceAuthStage(self.devices)]
