from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path


REPO_ROOT = Path(__file__).parents[2]
CACHE_MANAGER_ROOT = REPO_ROOT / "docker" / "cache-manager"
if str(CACHE_MANAGER_ROOT) not in sys.path:
    sys.path.append(str(CACHE_MANAGER_ROOT))


discovery = importlib.import_module("src.discovery")


def test_discover_cache_dirs_from_container_labels_resolves_mountpoints() -> None:
    labels = {
        "cache-manager.0.volume": "browser-cache",
        "cache-manager.1.volume": "build-cache",
        "cache-manager.1.path": "/pip",
        "cache-manager.2.volume": "unknown-volume",
        "other.label": "ignored",
    }
    mountpoints = {
        "browser-cache": "/var/lib/docker/volumes/browser-cache/_data",
        "build-cache": "/var/lib/docker/volumes/build-cache/_data",
    }

    out = discovery.discover_cache_dirs_from_container_labels(labels, mountpoints)

    assert out == [
        "/var/lib/docker/volumes/browser-cache/_data",
        os.path.join("/var/lib/docker/volumes/build-cache/_data", "pip"),
    ]


def test_discover_cache_dirs_from_container_labels_handles_missing_labels() -> None:
    assert discovery.discover_cache_dirs_from_container_labels(None, {}) == []
    assert discovery.discover_cache_dirs_from_container_labels({}, {"a": "/a"}) == []


def test_cache_directories_from_env_splits_on_pathsep() -> None:
    value = os.pathsep.join(["/tmp/one", " ", "/tmp/two "])
    assert discovery.cache_directories_from_env(value) == ["/tmp/one", "/tmp/two"]
    assert discovery.cache_directories_from_env(None) == []


def test_windows_cache_directories_lists_known_locations(monkeypatch) -> None:
    profiles = "C:\\Users\\me\\AppData\\Roaming\\Mozilla\\Firefox\\Profiles"
    real_listdir = discovery.os.listdir

    def _listdir(path):
        if path == profiles:
            return ["zzzz.backup", "abcd.default-release"]
        return real_listdir(path)

    monkeypatch.setattr(discovery.os, "listdir", _listdir)

    out = discovery.windows_cache_directories(
        {
            "LOCALAPPDATA": "C:\\Users\\me\\AppData\\Local",
            "APPDATA": "C:\\Users\\me\\AppData\\Roaming",
        }
    )

    assert "C:\\Users\\me\\AppData\\Local\\Temp" in out
    assert "C:\\Users\\me\\AppData\\Local\\Microsoft\\Windows\\INetCache" in out
    assert "C:\\Windows\\SoftwareDistribution\\Download" in out
    assert "C:\\Windows\\Prefetch" in out
    assert "C:\\Users\\me\\AppData\\Local\\Google\\Chrome\\User Data\\Default\\Cache" in out
    assert "C:\\Users\\me\\AppData\\Local\\Microsoft\\Edge\\User Data\\Default\\Cache" in out
    assert out[-2:] == [
        profiles + "\\abcd.default-release\\cache2",
        profiles + "\\zzzz.backup\\cache2",
    ]


def test_windows_cache_directories_without_firefox_profiles() -> None:
    out = discovery.windows_cache_directories(
        {
            "LOCALAPPDATA": "C:\\Users\\me\\AppData\\Local",
            "APPDATA": "C:\\Users\\nobody\\AppData\\Roaming",
        }
    )

    assert not any(item.endswith("cache2") for item in out)
    assert out[-1] == "C:\\Users\\me\\AppData\\Local\\Microsoft\\Edge\\User Data\\Default\\Cache"


def test_discover_cache_directories_filters_missing_and_duplicates(tmp_path: Path) -> None:
    existing = tmp_path / "cache"
    existing.mkdir()
    missing = tmp_path / "missing"

    out = discovery.discover_cache_directories(
        platform="linux",
        env={"CM_CACHE_DIRS": os.pathsep.join([str(existing), str(missing)])},
        extra=[str(existing)],
    )

    assert out == [str(existing)]


def test_discover_cache_directories_skips_windows_list_elsewhere() -> None:
    out = discovery.discover_cache_directories(platform="linux", env={})
    assert out == []
