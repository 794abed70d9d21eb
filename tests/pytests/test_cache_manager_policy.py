from __future__ import annotations

import importlib
import sys
from datetime import timedelta
from pathlib import Path


REPO_ROOT = Path(__file__).parents[2]
CACHE_MANAGER_ROOT = REPO_ROOT / "docker" / "cache-manager"
if str(CACHE_MANAGER_ROOT) not in sys.path:
    sys.path.append(str(CACHE_MANAGER_ROOT))

policy = importlib.import_module("src.policy")


def test_should_auto_clean_respects_cooldown() -> None:
    assert policy.should_auto_clean(5.0, 1.0, True, timedelta(seconds=10)) is False
    assert policy.should_auto_clean(5.0, 1.0, True, timedelta(seconds=31)) is True


def test_should_auto_clean_cooldown_ends_at_thirty_seconds() -> None:
    assert policy.should_auto_clean(5.0, 1.0, True, timedelta(seconds=29.9)) is False
    assert policy.should_auto_clean(5.0, 1.0, True, timedelta(seconds=30)) is True


def test_should_auto_clean_threshold_is_inclusive() -> None:
    assert policy.should_auto_clean(2.5, 2.5, True, None) is True
    assert policy.should_auto_clean(2.49, 2.5, True, None) is False


def test_should_auto_clean_disabled_never_cleans() -> None:
    assert policy.should_auto_clean(500.0, 1.0, False, None) is False
    assert policy.should_auto_clean(500.0, 1.0, False, timedelta(hours=1)) is False


def test_should_auto_clean_without_previous_clean_uses_threshold_only() -> None:
    assert policy.should_auto_clean(11.0, 10.0, True, None) is True
    assert policy.should_auto_clean(9.0, 10.0, True, None) is False


def test_threshold_config_defaults() -> None:
    config = policy.ThresholdConfig()
    assert config.threshold_gb == 10.0
    assert config.auto_clean_enabled is True
