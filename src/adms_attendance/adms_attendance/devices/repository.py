from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Device


class DeviceRepository(Protocol):
    """Device registry.

    Unknown and inactive devices both come back as ``None`` from the
    credential lookup so callers cannot tell them apart.
    """

    def find_active_by_credential(self, api_key: str) -> Optional[Device]:
        raise NotImplementedError

    def find_by_serial(self, serial_number: str) -> Optional[Device]:
        raise NotImplementedError

    def find_by_device_id(self, device_id: str) -> Optional[Device]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Device]:
        raise NotImplementedError

    def create(
        self,
        *,
        device_id: str,
        serial_number: str,
        ip_address: str,
        api_key: str,
        location: Optional[str] = None,
        faculty: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def set_active(self, device_id: str, *, is_active: bool) -> bool:
        raise NotImplementedError

    def touch_last_seen(self, device_pk: int, seen_at: datetime) -> None:
        raise NotImplementedError
