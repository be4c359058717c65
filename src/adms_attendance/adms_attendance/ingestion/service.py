from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..attendance.dedup import DeduplicationService
from ..audit.sink import AuditSink, redact_credential
from ..common.datetime_utils import now_utc
from ..core.exceptions import ConflictError, DomainError, InternalError, MissingCredentialError, ValidationError
from ..devices.repository import DeviceRepository
from .guard import IngestionGuard
from .schema import parse_device_credentials, parse_push

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushResult:
    attendance_id: int
    device_id: str
    status: str = "processed"

    def to_dict(self) -> dict:
        return {"attendance_id": self.attendance_id, "status": self.status}


def _local_naive(value: datetime) -> datetime:
    # DATETIME columns hold server local time without offset.
    return value.astimezone().replace(tzinfo=None)


class IngestionService:
    """One consolidated ADMS push pipeline.

    schema -> guard stages -> deduplication -> ledger insert -> audit.
    Domain errors propagate to the controller untouched; anything else is
    logged and surfaced as InternalError.
    """

    def __init__(
        self,
        *,
        push_guard: IngestionGuard,
        status_guard: IngestionGuard,
        dedup: DeduplicationService,
        devices: DeviceRepository,
        audit: AuditSink,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._push_guard = push_guard
        self._status_guard = status_guard
        self._dedup = dedup
        self._devices = devices
        self._audit = audit
        self._clock = clock

    def _reject_at_schema(self, exc: DomainError, payload: Any, *, source_ip: str) -> None:
        body = payload if isinstance(payload, Mapping) else {}
        claimed = body.get("device_id")
        api_key = body.get("api_key")
        self._audit.record(
            "ADMS_PUSH_REJECTED",
            level=logging.WARNING,
            stage="schema",
            rejection=type(exc).__name__,
            reason=getattr(exc, "reason", None) or str(exc),
            device_id=None,
            claimed_device_id=claimed if isinstance(claimed, str) else None,
            source_ip=source_ip,
            api_key=redact_credential(api_key) if isinstance(api_key, str) else None,
        )

    def push(
        self,
        payload: Any,
        *,
        source_ip: str,
        header_api_key: Optional[str] = None,
        header_timestamp: Optional[str] = None,
    ) -> PushResult:
        received_at = self._clock()
        try:
            try:
                push = parse_push(payload, header_api_key=header_api_key, header_timestamp=header_timestamp)
            except (ValidationError, MissingCredentialError) as exc:
                # Rejected before any registry lookup.
                self._reject_at_schema(exc, payload, source_ip=source_ip)
                raise

            device = self._push_guard.authorize(push.credentials, source_ip=source_ip, received_at=received_at)

            try:
                stored = self._dedup.commit(push.to_new_event(received_at=_local_naive(received_at)))
            except ConflictError as exc:
                self._audit.record(
                    "ADMS_PUSH_DUPLICATE",
                    device_id=device.device_id,
                    cloud_id=push.cloud_id,
                    user_id=push.user_id,
                    tanggal_absensi=push.tanggal_absensi,
                    tipe_absensi=push.tipe_absensi,
                    code=exc.kind.value,
                    source_ip=source_ip,
                )
                raise

            self._devices.touch_last_seen(device.id, _local_naive(received_at))
            self._audit.record(
                "ADMS_PUSH_SUCCESS",
                device_id=device.device_id,
                attendance_id=stored.id,
                cloud_id=stored.cloud_id,
                user_id=stored.user_id,
                nama=stored.nama,
                tipe_absensi=stored.tipe_absensi,
                tanggal_absensi=stored.tanggal_absensi,
                waktu_absensi=stored.waktu_absensi,
                source_ip=source_ip,
                api_key=redact_credential(push.api_key),
            )
            return PushResult(attendance_id=stored.id, device_id=device.device_id)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("ADMS push failed unexpectedly (source_ip=%s)", source_ip)
            raise InternalError("Internal server error") from exc

    def device_status(
        self,
        params: Mapping[str, Any],
        *,
        source_ip: str,
        header_api_key: Optional[str] = None,
    ) -> dict:
        """Device-side self check: who am I according to the registry."""

        received_at = self._clock()
        try:
            credentials = parse_device_credentials(params, header_api_key=header_api_key)
            device = self._status_guard.authorize(credentials, source_ip=source_ip, received_at=received_at)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("ADMS device status failed unexpectedly (source_ip=%s)", source_ip)
            raise InternalError("Internal server error") from exc

        return {
            **device.public_view(),
            "server_time": received_at.isoformat(),
        }
