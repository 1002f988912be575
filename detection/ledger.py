import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping

def now_ms() -> int:
    """Arrival clock used for every activity timestamp (milliseconds)."""
    return int(time.time() * 1000)

class ActivityKind(str, Enum):
    MESSAGE = "message"
    REACTION = "reaction"
    TYPING = "typing"
    COMMAND = "command"

    @property
    def reason(self) -> str:
        return _REASONS[self]

    @property
    def action(self) -> str:
        return _ACTIONS[self]

_REASONS = {
    ActivityKind.MESSAGE: "Consistent message intervals.",
    ActivityKind.REACTION: "Consistent reaction intervals.",
    ActivityKind.TYPING: "Consistent typing indicator intervals.",
    ActivityKind.COMMAND: "Consistent command execution intervals.",
}

_ACTIONS = {
    ActivityKind.MESSAGE: "sending messages",
    ActivityKind.REACTION: "adding reactions",
    ActivityKind.TYPING: "triggering typing indicators",
    ActivityKind.COMMAND: "executing commands",
}

@dataclass(frozen=True)
class DetectionConfig:
    min_events: int
    time_window_ms: int
    regularity_threshold_ms: int

    def __post_init__(self):
        if self.min_events < 2:
            raise ValueError(f"min_events must be at least 2, got {self.min_events}")
        if self.time_window_ms <= 0:
            raise ValueError(f"time_window_ms must be positive, got {self.time_window_ms}")
        if self.regularity_threshold_ms < 0:
            raise ValueError(f"regularity_threshold_ms must not be negative, got {self.regularity_threshold_ms}")

DAY_MS = 24 * 60 * 60 * 1000
FIVE_MINUTES_MS = 5 * 60 * 1000

DEFAULT_DETECTION_CONFIGS: Dict[ActivityKind, DetectionConfig] = {
    ActivityKind.MESSAGE: DetectionConfig(10, DAY_MS, FIVE_MINUTES_MS),
    ActivityKind.REACTION: DetectionConfig(10, DAY_MS, FIVE_MINUTES_MS),
    ActivityKind.TYPING: DetectionConfig(10, DAY_MS, FIVE_MINUTES_MS),
    ActivityKind.COMMAND: DetectionConfig(5, DAY_MS, FIVE_MINUTES_MS),
}

class ActivityLedger:
    """
    Sliding-window event log, one independent partition per ActivityKind.

    Each partition maps user_id -> timestamps (ms) in arrival order. Entries are
    created lazily on the first event and removed once pruning empties them.
    """

    def __init__(self, configs: Mapping[ActivityKind, DetectionConfig] = DEFAULT_DETECTION_CONFIGS):
        missing = [kind.value for kind in ActivityKind if kind not in configs]
        if missing:
            raise ValueError(f"Missing detection config for: {', '.join(missing)}")
        self.configs = dict(configs)
        self._logs: Dict[ActivityKind, Dict[int, List[int]]] = {kind: {} for kind in ActivityKind}

    def _in_window(self, kind, timestamps, now):
        window = self.configs[kind].time_window_ms
        return [t for t in timestamps if now - t <= window]

    def record(self, kind: ActivityKind, user_id: int, timestamp: int) -> List[int]:
        """Append, prune against the append instant, and return the pruned sequence."""
        log = self._logs[kind]
        timestamps = log.get(user_id, [])
        timestamps.append(timestamp)

        pruned = self._in_window(kind, timestamps, timestamp)
        log[user_id] = pruned
        return list(pruned)

    def prune_all(self, now: int) -> int:
        """Drop expired timestamps everywhere. Returns how many user entries were evicted."""
        evicted = 0
        for kind, log in self._logs.items():
            # Snapshot keys; entries are deleted while walking.
            for user_id in list(log):
                pruned = self._in_window(kind, log[user_id], now)
                if pruned:
                    log[user_id] = pruned
                else:
                    del log[user_id]
                    evicted += 1
        return evicted

    def snapshot(self, kind: ActivityKind, user_id: int) -> List[int]:
        return list(self._logs[kind].get(user_id, []))

    def tracked_users(self, kind: ActivityKind) -> int:
        return len(self._logs[kind])

    def __contains__(self, key):
        kind, user_id = key
        return user_id in self._logs[kind]
