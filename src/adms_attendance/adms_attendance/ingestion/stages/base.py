from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...devices.model import Device
from ..schema import DeviceCredentials


@dataclass
class GuardContext:
    """State carried through the guard pipeline for one request."""

    credentials: DeviceCredentials
    source_ip: str
    received_at: datetime
    device: Optional[Device] = None


class GuardStage(ABC):
    """Strategy Pattern: one independent check of an incoming device request.

    A stage either returns (pass control to the next one) or raises an
    AuthenticationError subclass that ends the request.
    """

    name: str = "stage"

    @abstractmethod
    def check(self, ctx: GuardContext) -> None:
        raise NotImplementedError
