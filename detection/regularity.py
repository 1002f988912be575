from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from detection.ledger import ActivityKind, DetectionConfig, DEFAULT_DETECTION_CONFIGS

@dataclass(frozen=True)
class Verdict:
    user_id: int
    kind: ActivityKind
    reason: str
    is_regular: bool

def intervals(timestamps):
    return [timestamps[i + 1] - timestamps[i] for i in range(len(timestamps) - 1)]

def median(values):
    """Middle element of a sorted copy, or the mean of the two middle elements."""
    if not values:
        raise ValueError("median() of an empty sequence")

    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2

class RegularityDetector:
    """
    Flags timestamp sequences whose intervals barely deviate from their median.

    A sequence is regular when every interval lies within
    ``regularity_threshold_ms`` of the median interval. One human-sized outlier
    is enough to clear the user for that evaluation. Stateless: every call is a
    full recomputation over the sequence it is given.
    """

    def __init__(self, configs: Mapping[ActivityKind, DetectionConfig] = DEFAULT_DETECTION_CONFIGS):
        self.configs = dict(configs)

    def is_evaluable(self, kind: ActivityKind, timestamps: Sequence[int]) -> bool:
        return len(timestamps) >= self.configs[kind].min_events

    def evaluate(self, kind: ActivityKind, user_id: int, timestamps: Sequence[int]) -> Optional[Verdict]:
        """
        Returns None while fewer than ``min_events`` timestamps are available,
        otherwise a Verdict with ``is_regular`` set.
        """
        if not self.is_evaluable(kind, timestamps):
            return None

        threshold = self.configs[kind].regularity_threshold_ms
        gaps = intervals(timestamps)
        center = median(gaps)

        if all(abs(gap - center) <= threshold for gap in gaps):
            return Verdict(user_id=user_id, kind=kind, reason=kind.reason, is_regular=True)

        return Verdict(
            user_id=user_id,
            kind=kind,
            reason=f"Irregular {kind.value} intervals.",
            is_regular=False,
        )
