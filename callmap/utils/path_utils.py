from fnmatch import fnmatch
from pathlib import Path

from ..core import constants as cs


def to_posix(path: Path) -> str:
    return path.as_posix()


def _matches(rel_path_str: str, patterns: frozenset[str]) -> bool:
    return any(
        rel_path_str == p
        or rel_path_str.startswith(f"{p.rstrip('/')}/")
        or fnmatch(rel_path_str, p)
        for p in patterns
    )


def should_skip_path(
    path: Path,
    repo_path: Path,
    exclude_paths: frozenset[str] | None = None,
    unignore_paths: frozenset[str] | None = None,
) -> bool:
    rel_path = path.relative_to(repo_path)
    rel_path_str = rel_path.as_posix()
    if unignore_paths and _matches(rel_path_str, unignore_paths):
        return False
    dir_parts = rel_path.parent.parts
    if exclude_paths and (
        not exclude_paths.isdisjoint(dir_parts) or _matches(rel_path_str, exclude_paths)
    ):
        return True
    return not cs.IGNORE_DIRS.isdisjoint(dir_parts)


def language_for_path(path: Path) -> str | None:
    return cs.LANGUAGE_EXTENSIONS.get(path.suffix.lower())
