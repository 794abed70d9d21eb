from __future__ import annotations

import logging
import os


LOGGER = logging.getLogger("cache_manager")


def directory_size_bytes(path: str) -> int:
    """Return the total size of regular files under *path*.

    Missing or unreadable directories count as empty. Symbolic links are
    neither followed nor counted.
    """
    total = 0
    pending = [str(path)]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += int(entry.stat(follow_symlinks=False).st_size)
                        elif entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                    except OSError:
                        LOGGER.debug("[CACHE]: Skipping unreadable entry %s", entry.path)
        except OSError:
            LOGGER.debug("[CACHE]: Skipping unreadable directory %s", current)

    return total
