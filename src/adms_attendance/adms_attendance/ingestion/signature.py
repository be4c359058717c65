"""HMAC request signatures for device pushes."""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Mapping

SIGNATURE_FIELD = "signature"


def canonical_payload(payload: Mapping[str, Any]) -> str:
    """Deterministic serialization of every field except the signature itself."""

    body = {k: v for k, v in payload.items() if k != SIGNATURE_FIELD}
    return json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def generate_signature(payload: Mapping[str, Any], secret: str) -> str:
    """HMAC-SHA256 (hex) of the canonical payload keyed by the device secret."""

    return hmac.new(
        secret.encode("utf-8"),
        canonical_payload(payload).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(payload: Mapping[str, Any], signature: str, secret: str) -> bool:
    expected = generate_signature(payload, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("utf-8"))
