"""Image version marker files.

The user marker records the image version currently applied to the stack, the
seed marker ships with the source tree and names the latest known version.
"""

import os
import shutil
from pathlib import Path


class MarkerError(RuntimeError):
    """A version marker file is missing or empty."""


def read_marker(path: Path) -> str:
    """Read the version from a marker file.

    Args:
        path: Path to the marker file

    Returns:
        First line of the file without its line ending

    Raises:
        MarkerError: If the file does not exist or its first line is empty
    """
    try:
        with open(path, "r") as f:
            first_line = f.readline()
    except FileNotFoundError as e:
        raise MarkerError(f"Version marker not found: {path}") from e

    version = first_line.rstrip("\r\n")
    if not version.strip():
        raise MarkerError(f"Version marker is empty: {path}")
    return version


def seed_is_newer(seed_version: str, user_version: str) -> bool:
    """Compare versions as plain strings.

    Ordering is lexicographic, not semantic: "1.10" is not newer than "1.9".
    """
    return seed_version > user_version


def apply_seed(user_path: Path, seed_path: Path, previous_path: Path) -> None:
    """Replace the user marker with the seed marker, keeping the old one.

    The previous marker is copied aside before the user marker is touched, and
    the new content is renamed into place, so an interruption never leaves the
    user marker overwritten without a backup.

    Args:
        user_path: User marker to update
        seed_path: Bundled seed marker
        previous_path: Where the pre-upgrade user marker is preserved
    """
    shutil.copyfile(user_path, previous_path)

    tmp_path = user_path.with_name(f".{user_path.name}.tmp")
    shutil.copyfile(seed_path, tmp_path)
    try:
        os.replace(tmp_path, user_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
