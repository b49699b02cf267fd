"""
Project metadata helpers.

Name and version are read from the installed distribution when available and
from the nearest ``pyproject.toml`` otherwise (editable checkouts, tests).
"""
import tomllib
from functools import lru_cache
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


@lru_cache(maxsize=None)
def _load_pyproject(start: Path, max_up: int) -> dict:
    pyproject = find_pyproject(start, max_up=max_up)
    if pyproject is None:
        return {}
    try:
        with pyproject.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def get_pyproject_value(
    key: str,
    start: str | Path | None = None,
    max_up: int = 5,
    default: Any = None,
) -> Any:
    """
    Return the value for a dot-separated `key` (e.g. "project.version") from the
    nearest pyproject.toml, or `default` when the file or key is missing.
    """
    if not key:
        return default

    start_path = Path(start).resolve() if start is not None else Path(__file__).resolve().parent
    cur: Any = _load_pyproject(start_path, max_up)
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(default: str = "product-catalog-api") -> str:
    return get_pyproject_value("project.name", default=default)


def get_project_version(default: str = "unknown", prefer_installed: bool = True) -> str:
    """
    Version of the running project; the installed distribution wins over the
    checkout's pyproject when `prefer_installed` is set.
    """
    if prefer_installed:
        try:
            return importlib_metadata.version(get_project_name())
        except importlib_metadata.PackageNotFoundError:
            pass
    return get_pyproject_value("project.version", default=default)
