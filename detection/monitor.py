import math
from numbers import Real
from typing import Callable, Optional

from detection.ledger import ActivityKind, ActivityLedger
from detection.regularity import RegularityDetector, Verdict
from utils.logger import get_logger

log = get_logger()

# (user_id, guild_id, kind, reason) -> None. Must only schedule the escalation.
VerdictCallback = Callable[[int, int, ActivityKind, str], None]

def is_valid_timestamp(timestamp) -> bool:
    if isinstance(timestamp, bool) or not isinstance(timestamp, Real):
        return False
    return math.isfinite(timestamp) and timestamp >= 0

class ActivityMonitor:
    """
    Entry point for activity events and sweep ticks.

    Records each event in the ledger, re-evaluates the user's pruned sequence
    for that kind, and hands regular verdicts to ``on_verdict``.
    """

    def __init__(self, ledger: ActivityLedger, detector: RegularityDetector, on_verdict: VerdictCallback):
        self.ledger = ledger
        self.detector = detector
        self.on_verdict = on_verdict

    def on_activity(self, kind: ActivityKind, user_id: int, guild_id: int, timestamp) -> Optional[Verdict]:
        if not is_valid_timestamp(timestamp):
            log.debug(f"Dropped {kind.value} event for user {user_id}: bad timestamp {timestamp!r}")
            return None

        timestamps = self.ledger.record(kind, user_id, timestamp)
        verdict = self.detector.evaluate(kind, user_id, timestamps)

        if verdict is not None and verdict.is_regular:
            log.detection(
                f"Potential self-bot detected: User ID {user_id} is {kind.action} at regular intervals."
            )
            try:
                self.on_verdict(user_id, guild_id, kind, verdict.reason)
            except Exception as e:
                log.error(f"Failed to dispatch verdict for user {user_id}", exc_info=e)

        return verdict

    def on_sweep_tick(self, now: int) -> int:
        return self.ledger.prune_all(now)
