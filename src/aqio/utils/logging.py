"""
pyproject.toml lookups used to label log records with the service name and version.

Installed distributions answer from `importlib.metadata`; a source checkout
falls back to the nearest pyproject.toml above this file.
"""

import tomllib
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def get_pyproject_value(
    key: str,
    start: str | Path | None = None,
    max_up: int = 5,
    default: Any = None,
) -> Any:
    """
    Return the value at dotted `key` (e.g. "project.version") in the nearest pyproject.toml,
    or `default` when the file is missing, unreadable or lacks the key.
    """
    start_path = Path(start).resolve() if start is not None else Path(__file__).resolve().parent
    pyproject = find_pyproject(start_path, max_up=max_up)
    if pyproject is None or not key:
        return default

    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return default

    cur: Any = data
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def get_project_name(
    start: Path | str | None = None,
    max_up: int = 5,
    default: str | None = "aqio",
) -> str | None:
    return get_pyproject_value("project.name", start=start, max_up=max_up, default=default)


def get_project_version(
    start: Path | str | None = None,
    max_up: int = 5,
    default: str = "unknown",
    prefer_installed: bool = True,
) -> str:
    name = get_project_name(start=start, max_up=max_up, default="aqio")
    if prefer_installed and name:
        try:
            return importlib_metadata.version(name)
        except importlib_metadata.PackageNotFoundError:
            pass
    value = get_pyproject_value("project.version", start=start, max_up=max_up, default=None)
    return value if value is not None else default


__all__ = ["find_pyproject", "get_pyproject_value", "get_project_name", "get_project_version"]
