from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..audit.sink import AuditSink, redact_credential
from ..core.exceptions import AuthenticationError
from ..devices.model import Device
from .schema import DeviceCredentials
from .stages.base import GuardContext, GuardStage

logger = logging.getLogger(__name__)


class IngestionGuard:
    """Runs the configured stages in order; the first failure ends the request.

    Every rejection is audited at WARNING with enough detail to trace an
    attack, but the caller only ever sees the generic public message.
    """

    def __init__(self, stages: Sequence[GuardStage], audit: AuditSink):
        self._stages = tuple(stages)
        self._audit = audit

    @property
    def stage_names(self) -> tuple[str, ...]:
        return tuple(stage.name for stage in self._stages)

    def authorize(self, credentials: DeviceCredentials, *, source_ip: str, received_at: datetime) -> Device:
        ctx = GuardContext(credentials=credentials, source_ip=source_ip, received_at=received_at)
        for stage in self._stages:
            try:
                stage.check(ctx)
            except AuthenticationError as exc:
                self._audit.record(
                    "ADMS_PUSH_REJECTED",
                    level=logging.WARNING,
                    stage=stage.name,
                    rejection=type(exc).__name__,
                    reason=exc.reason,
                    device_id=ctx.device.device_id if ctx.device else None,
                    claimed_device_id=credentials.device_id,
                    source_ip=source_ip,
                    api_key=redact_credential(credentials.api_key),
                )
                raise

        if ctx.device is None:
            # A pipeline without DeviceAuthStage is a wiring mistake.
            logger.error("Guard pipeline %s finished without resolving a device", self.stage_names)
            raise AuthenticationError("no_device_stage")
        return ctx.device
