from __future__ import annotations

from datetime import timedelta

from ...core.constants import DEFAULT_REPLAY_TOLERANCE_SECONDS
from ...core.exceptions import ReplayError
from .base import GuardContext, GuardStage


class ReplayWindowStage(GuardStage):
    """Reject requests whose timestamp is too far from the server clock."""

    name = "replay"

    def __init__(self, *, tolerance_seconds: int = DEFAULT_REPLAY_TOLERANCE_SECONDS, required: bool = False):
        self._tolerance = timedelta(seconds=int(tolerance_seconds))
        self._required = required

    def check(self, ctx: GuardContext) -> None:
        timestamp = ctx.credentials.timestamp
        if timestamp is None:
            if self._required:
                raise ReplayError("missing_timestamp")
            return

        drift = abs(ctx.received_at - timestamp)
        if drift > self._tolerance:
            raise ReplayError(f"timestamp_outside_window:{int(drift.total_seconds())}s")
