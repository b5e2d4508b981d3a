"""Resolve the commit a build was made from.

ko copies the repository's ``.git/HEAD`` (and the ref it points to) into the
image's data directory, exposed at runtime as ``KO_DATA_PATH``.
"""

import os
import re
from pathlib import Path

from regtrack.errors import ConfigurationError, InvalidCommitIDError

COMMIT_ID_FILE = "HEAD"
DATA_PATH_ENV = "KO_DATA_PATH"

_COMMIT_ID_RE = re.compile(r"^[a-f0-9]{40}$")
_REF_PREFIX = "ref: "


def get(data_dir: Path | None = None) -> str:
    """Return the first 7 characters of the commit ID."""
    return _commit_id(data_dir)[:7]


def get_full(data_dir: Path | None = None) -> str:
    """Return the full 40-character commit ID."""
    return _commit_id(data_dir)


def _commit_id(data_dir: Path | None) -> str:
    commit_id = _read(COMMIT_ID_FILE, data_dir)
    # One level of symbolic ref only: "ref: refs/heads/main"
    if commit_id.startswith(_REF_PREFIX):
        commit_id = _read(commit_id.removeprefix(_REF_PREFIX), data_dir)
    if not _COMMIT_ID_RE.match(commit_id):
        raise InvalidCommitIDError(commit_id)
    return commit_id


def _data_dir() -> Path:
    data_path = os.environ.get(DATA_PATH_ENV, "")
    if not data_path:
        raise ConfigurationError(f"{DATA_PATH_ENV!r} does not exist or is empty")
    return Path(data_path)


def _read(filename: str, data_dir: Path | None) -> str:
    base = (data_dir or _data_dir()).resolve()
    # Refs are always relative to the data directory, even "ref: /refs/heads/x"
    path = (base / filename.lstrip("/")).resolve()
    if not path.is_relative_to(base):
        raise ConfigurationError(f"{filename!r} is outside {base}", {"path": str(path)})
    try:
        return path.read_text().strip()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}", {"path": str(path)}) from exc
