from __future__ import annotations

from datetime import date, datetime, time, timezone

import pytest

from src.adms_attendance.adms_attendance.core.enums import Jabatan, TipeAbsensi
from src.adms_attendance.adms_attendance.core.exceptions import MissingCredentialError, ValidationError
from src.adms_attendance.adms_attendance.ingestion.schema import parse_device_credentials, parse_push
from src.adms_attendance.adms_attendance.ingestion.signature import canonical_payload, generate_signature, verify_signature


def test_parse_push_normalizes_enums_and_defaults(make_payload):
    push = parse_push(make_payload(jabatan=" karyawan ", tipe_absensi="pulang", waktu_absensi="16:05"))

    assert push.jabatan == Jabatan.KARYAWAN
    assert push.tipe_absensi == TipeAbsensi.PULANG
    assert push.tanggal_absensi == date(2024, 2, 15)
    assert push.waktu_absensi == time(16, 5)
    assert push.verifikasi == "fingerprint"
    assert push.timestamp is None
    assert push.credentials.device_id == "FP-FT-01"


@pytest.mark.parametrize(
    "raw,expected",
    [
        (1707960600000, datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)),
        (1707960600, datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)),
        ("1707960600000", datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)),
        ("2024-02-15T08:30:00+07:00", datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)),
        ("2024-02-15T01:30:00Z", datetime(2024, 2, 15, 1, 30, tzinfo=timezone.utc)),
    ],
)
def test_timestamp_formats(make_payload, raw, expected):
    assert parse_push(make_payload(timestamp=raw)).timestamp == expected


@pytest.mark.parametrize(
    "field,value",
    [
        ("tanggal_absensi", "15-02-2024"),
        ("waktu_absensi", "25:00:00"),
        ("jabatan", "MAHASISWA"),
        ("timestamp", "kemarin"),
        ("timestamp", True),
        ("user_id", {"id": 1}),
        ("cloud_id", "x" * 101),
    ],
)
def test_invalid_fields_are_rejected(make_payload, field, value):
    with pytest.raises(ValidationError):
        parse_push(make_payload(**{field: value}))


def test_non_object_body_is_rejected():
    with pytest.raises(ValidationError):
        parse_push(None)
    with pytest.raises(ValidationError):
        parse_push(["not", "an", "object"])


def test_body_api_key_wins_over_header(make_payload):
    push = parse_push(make_payload(api_key="body-key"), header_api_key="header-key")
    assert push.api_key == "body-key"

    with pytest.raises(MissingCredentialError):
        parse_push(make_payload(api_key="   "))


def test_device_credentials_prefer_header():
    creds = parse_device_credentials({"api_key": "query-key", "sn": "SN-1"}, header_api_key="header-key")
    assert creds.api_key == "header-key"
    assert creds.sn == "SN-1"
    assert creds.device_id is None


def test_canonical_payload_ignores_signature_and_key_order():
    a = {"b": 1, "a": "Ä", "signature": "zzz"}
    b = {"a": "Ä", "b": 1}
    assert canonical_payload(a) == canonical_payload(b) == '{"a":"Ä","b":1}'


def test_signature_verification_is_case_insensitive_hex():
    body = {"cloud_id": "C1", "user_id": "U1"}
    sig = generate_signature(body, "secret")
    assert len(sig) == 64
    assert verify_signature(body, sig.upper(), "secret")
    assert not verify_signature(body, sig, "other-secret")
    assert not verify_signature(body, "not-hex-at-all", "secret")
