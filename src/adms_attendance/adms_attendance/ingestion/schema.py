"""Typed boundary for the ADMS push payload.

Everything a device sends is validated here, before any registry lookup.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Mapping, Optional

from ..attendance.model import NewAttendanceEvent
from ..common.datetime_utils import parse_iso_date, parse_request_timestamp, parse_time_of_day
from ..common.validators import require_enum, require_max_length, require_non_empty
from ..core.constants import DEFAULT_VERIFIKASI
from ..core.enums import Jabatan, TipeAbsensi
from ..core.exceptions import MissingCredentialError, ValidationError

REQUIRED_FIELDS = (
    "cloud_id",
    "device_id",
    "user_id",
    "nama",
    "nip",
    "jabatan",
    "tanggal_absensi",
    "waktu_absensi",
    "tipe_absensi",
)

_MAX_LENGTHS = {
    "cloud_id": 100,
    "device_id": 50,
    "user_id": 50,
    "nip": 50,
    "nama": 255,
    "verifikasi": 100,
    "sn": 100,
}


@dataclass(frozen=True)
class DeviceCredentials:
    """Security fields a device presents, independent of the request kind."""

    api_key: str
    device_id: Optional[str] = None
    sn: Optional[str] = None
    timestamp: Optional[datetime] = None
    signature: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class AttendancePush:
    cloud_id: str
    device_id: str
    user_id: str
    nip: str
    nama: str
    jabatan: Jabatan
    tanggal_absensi: date
    waktu_absensi: time
    tipe_absensi: TipeAbsensi
    verifikasi: str
    api_key: str
    timestamp: Optional[datetime] = None
    signature: Optional[str] = None
    sn: Optional[str] = None
    # Body exactly as received; the signature is computed over it.
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def credentials(self) -> DeviceCredentials:
        return DeviceCredentials(
            api_key=self.api_key,
            device_id=self.device_id,
            sn=self.sn,
            timestamp=self.timestamp,
            signature=self.signature,
            raw=self.raw,
        )

    def to_new_event(self, *, received_at: datetime) -> NewAttendanceEvent:
        return NewAttendanceEvent(
            cloud_id=self.cloud_id,
            device_id=self.device_id,
            user_id=self.user_id,
            nip=self.nip,
            nama=self.nama,
            jabatan=self.jabatan,
            tanggal_absensi=self.tanggal_absensi,
            waktu_absensi=self.waktu_absensi,
            tipe_absensi=self.tipe_absensi,
            verifikasi=self.verifikasi,
            tanggal_upload=received_at,
        )


def _text(payload: Mapping[str, Any], name: str) -> str:
    value = require_non_empty(payload.get(name), name)
    max_len = _MAX_LENGTHS.get(name)
    return require_max_length(value, name, max_len) if max_len else value


def _optional_text(value: Any, name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ValidationError(f"Invalid {name} value")
    text = str(value).strip()
    if not text:
        return None
    max_len = _MAX_LENGTHS.get(name)
    return require_max_length(text, name, max_len) if max_len else text


def parse_push(
    payload: Any,
    *,
    header_api_key: Optional[str] = None,
    header_timestamp: Optional[str] = None,
) -> AttendancePush:
    """Validate a raw push body into an AttendancePush.

    Raises ValidationError for malformed input and MissingCredentialError when
    no API key was presented at all.
    """

    if not isinstance(payload, Mapping) or not payload:
        raise ValidationError("Request body must be a JSON object")

    missing = [name for name in REQUIRED_FIELDS if payload.get(name) in (None, "")]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))

    jabatan = require_enum(payload.get("jabatan"), Jabatan, "jabatan")
    tipe_absensi = require_enum(payload.get("tipe_absensi"), TipeAbsensi, "tipe_absensi")

    try:
        tanggal = parse_iso_date(_text(payload, "tanggal_absensi"))
    except ValueError:
        raise ValidationError("Invalid tanggal_absensi value (YYYY-MM-DD)")
    try:
        waktu = parse_time_of_day(_text(payload, "waktu_absensi"))
    except ValueError:
        raise ValidationError("Invalid waktu_absensi value (HH:MM:SS)")

    raw_timestamp = payload.get("timestamp")
    if raw_timestamp in (None, ""):
        raw_timestamp = header_timestamp
    timestamp = parse_request_timestamp(raw_timestamp) if raw_timestamp not in (None, "") else None

    verifikasi = _optional_text(payload.get("verifikasi"), "verifikasi") or DEFAULT_VERIFIKASI
    signature = _optional_text(payload.get("signature"), "signature")
    sn = _optional_text(payload.get("sn"), "sn")

    api_key = _optional_text(payload.get("api_key"), "api_key") or _optional_text(header_api_key, "api_key")
    if not api_key:
        raise MissingCredentialError("missing_api_key")

    return AttendancePush(
        cloud_id=_text(payload, "cloud_id"),
        device_id=_text(payload, "device_id"),
        user_id=_text(payload, "user_id"),
        nip=_text(payload, "nip"),
        nama=_text(payload, "nama"),
        jabatan=jabatan,
        tanggal_absensi=tanggal,
        waktu_absensi=waktu,
        tipe_absensi=tipe_absensi,
        verifikasi=verifikasi,
        api_key=api_key,
        timestamp=timestamp,
        signature=signature,
        sn=sn,
        raw=dict(payload),
    )


def parse_device_credentials(
    params: Mapping[str, Any],
    *,
    header_api_key: Optional[str] = None,
) -> DeviceCredentials:
    """Credentials for device-side requests that carry no attendance data."""

    api_key = _optional_text(header_api_key, "api_key") or _optional_text(params.get("api_key"), "api_key")
    if not api_key:
        raise MissingCredentialError("missing_api_key")

    return DeviceCredentials(
        api_key=api_key,
        device_id=_optional_text(params.get("device_id"), "device_id"),
        sn=_optional_text(params.get("sn"), "sn"),
        raw=dict(params),
    )
