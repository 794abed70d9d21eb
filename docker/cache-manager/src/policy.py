from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


CLEAN_COOLDOWN = timedelta(seconds=30)


@dataclass
class ThresholdConfig:
    threshold_gb: float = 10.0
    auto_clean_enabled: bool = True


def should_auto_clean(
    current_size_gb: float,
    threshold_gb: float,
    auto_clean_enabled: bool,
    last_clean_age: timedelta | None,
) -> bool:
    if not auto_clean_enabled:
        return False

    # Still cooling down from the previous pass, whether or not it freed anything.
    if last_clean_age is not None and last_clean_age < CLEAN_COOLDOWN:
        return False

    return current_size_gb >= threshold_gb
