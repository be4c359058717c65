from __future__ import annotations

from ...core.exceptions import AuthenticationError
from ..signature import verify_signature
from .base import GuardContext, GuardStage


class SignatureStage(GuardStage):
    """HMAC over the canonical body, keyed by the resolved device secret."""

    name = "signature"

    def __init__(self, *, required: bool = False):
        self._required = required

    def check(self, ctx: GuardContext) -> None:
        signature = ctx.credentials.signature
        if signature is None:
            if self._required:
                raise AuthenticationError("missing_signature")
            return

        if ctx.device is None:
            raise AuthenticationError("signature_check_without_device")

        if not verify_signature(ctx.credentials.raw, signature, ctx.device.api_key):
            raise AuthenticationError("signature_mismatch")
