"""Read the list of device names to delete."""

import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


def parse_device_names(text: str) -> List[str]:
    """
    Split newline-delimited text into device names.

    Whitespace is trimmed and blank lines are skipped; every other line is a
    device name, including names that start with '#'.
    Order and duplicates are preserved.
    """
    names = []
    for line in text.splitlines():
        name = line.strip()
        if not name:
            continue
        names.append(name)
    return names


def read_device_names(path: Union[str, Path]) -> List[str]:
    """Read device names from a file. Missing/unreadable files raise OSError."""
    # utf-8-sig drops a BOM left by Windows editors
    with open(path, 'r', encoding='utf-8-sig') as f:
        names = parse_device_names(f.read())
    logger.info(f"Loaded {len(names)} device name(s) from {path}")
    return names
