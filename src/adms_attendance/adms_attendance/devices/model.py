from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Device:
    """Mesin fingerprint terdaftar: trust anchor for every ingestion call."""

    id: int
    device_id: str
    serial_number: str
    ip_address: str
    api_key: str
    is_active: bool = True
    location: Optional[str] = None
    faculty: Optional[str] = None
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def public_view(self) -> dict:
        """Representation safe to return to operators (no shared secret)."""

        return {
            "device_id": self.device_id,
            "serial_number": self.serial_number,
            "ip_address": self.ip_address,
            "location": self.location,
            "faculty": self.faculty,
            "is_active": self.is_active,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
        }


@dataclass(frozen=True)
class ProvisionedDevice:
    device: Device
    api_key: str
