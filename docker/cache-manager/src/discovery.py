from __future__ import annotations

import ntpath
import os
import re
import sys
import tempfile
from typing import Iterable, Mapping


_CACHE_MANAGER_LABEL_PATTERN = re.compile(r"^cache-manager\.(\d+)\.(.+)$")


def windows_cache_directories(env: Mapping[str, str]) -> list[str]:
    out: list[str] = [tempfile.gettempdir()]

    local_appdata = str(env.get("LOCALAPPDATA") or "")
    if local_appdata:
        out.append(ntpath.join(local_appdata, "Temp"))
        out.append(ntpath.join(local_appdata, "Microsoft", "Windows", "INetCache"))

    out.append("C:\\Windows\\SoftwareDistribution\\Download")
    out.append("C:\\Windows\\Prefetch")

    if local_appdata:
        out.append(ntpath.join(local_appdata, "Google", "Chrome", "User Data", "Default", "Cache"))
        out.append(ntpath.join(local_appdata, "Microsoft", "Edge", "User Data", "Default", "Cache"))

        appdata = str(env.get("APPDATA") or "")
        if appdata:
            profiles = ntpath.join(appdata, "Mozilla", "Firefox", "Profiles")
            try:
                for name in sorted(os.listdir(profiles)):
                    out.append(ntpath.join(profiles, name, "cache2"))
            except OSError:
                pass

    return out


def cache_directories_from_env(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in str(value).split(os.pathsep) if item.strip()]


def discover_cache_dirs_from_container_labels(
    labels: dict[str, str] | None,
    mountpoints: Mapping[str, str],
) -> list[str]:
    if not labels:
        return []

    buckets: dict[int, dict[str, str]] = {}
    for key, value in labels.items():
        match = _CACHE_MANAGER_LABEL_PATTERN.match(str(key))
        if not match:
            continue

        index = int(match.group(1))
        field_name = str(match.group(2))
        if index not in buckets:
            buckets[index] = {}
        buckets[index][field_name] = str(value)

    out: list[str] = []
    for index in sorted(buckets.keys()):
        item = buckets[index]
        mountpoint = str(mountpoints.get(item.get("volume") or "") or "")
        if not mountpoint:
            continue

        normalized = str(item.get("path") or "").lstrip("/")
        out.append(os.path.join(mountpoint, normalized) if normalized else mountpoint)

    return out


def discover_cache_dirs_from_containers() -> list[str]:
    import docker

    client = docker.from_env()
    mountpoints: dict[str, str] = {}
    for volume in client.volumes.list():
        attrs = dict(volume.attrs or {})
        mountpoints[str(volume.name)] = str(attrs.get("Mountpoint") or "")

    out: list[str] = []
    for container in client.containers.list():
        attrs = dict(container.attrs or {})
        config = dict(attrs.get("Config") or {})
        out.extend(discover_cache_dirs_from_container_labels(config.get("Labels"), mountpoints))
    return out


def discover_cache_directories(
    *,
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
    extra: Iterable[str] = (),
) -> list[str]:
    platform = platform or sys.platform
    env = os.environ if env is None else env

    candidates: list[str] = []
    if platform.startswith("win"):
        candidates.extend(windows_cache_directories(env))
    candidates.extend(cache_directories_from_env(env.get("CM_CACHE_DIRS")))
    candidates.extend(str(item) for item in extra)

    out: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        if os.path.isdir(candidate):
            out.append(candidate)
    return out
