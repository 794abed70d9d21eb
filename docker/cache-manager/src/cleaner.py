from __future__ import annotations

import logging
import os
from dataclasses import dataclass


LOGGER = logging.getLogger("cache_manager")


@dataclass
class CleanOutcome:
    files_deleted: int = 0
    bytes_reclaimed: int = 0


def clean_directory(path: str, outcome: CleanOutcome) -> CleanOutcome:
    """Delete files under *path* and prune directories emptied by it.

    *path* itself is kept. Entries that cannot be removed are left in place and
    are not counted in *outcome*.
    """
    pending = [str(path)]
    # Pre-order; removed in reverse so children go before their parents.
    visited_dirs: list[str] = []

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as iterator:
                entries = list(iterator)
        except OSError:
            LOGGER.debug("[CACHE]: Cannot list %s", current)
            continue

        for entry in entries:
            try:
                is_file = entry.is_file(follow_symlinks=False)
                is_dir = not is_file and entry.is_dir(follow_symlinks=False)
                file_size = int(entry.stat(follow_symlinks=False).st_size) if is_file else 0
            except OSError:
                continue

            if is_file:
                try:
                    os.remove(entry.path)
                except OSError:
                    LOGGER.debug("[CACHE]: Could not delete %s", entry.path)
                    continue
                outcome.files_deleted += 1
                outcome.bytes_reclaimed += file_size
            elif is_dir:
                visited_dirs.append(entry.path)
                pending.append(entry.path)

    for directory in reversed(visited_dirs):
        try:
            os.rmdir(directory)
        except OSError:
            pass

    return outcome
