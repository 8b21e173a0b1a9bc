"""
Loading a corpus of `SourceFile`s from a directory on disk.

Files are selected by extension, skipping the usual dependency and build
directories plus anything excluded by a `.callmapignore` at the root. Paths are
stored relative to the root in POSIX form and the corpus is sorted by path so
repeated runs see the same order.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from callmap.core import constants as cs
from callmap.core import logs as ls
from callmap.core.config import load_callmapignore_patterns
from callmap.data_models.models import SourceFile
from callmap.infrastructure import exceptions as ex
from callmap.utils.path_utils import language_for_path, should_skip_path, to_posix


def iter_source_paths(
    root: Path,
    exclude_paths: frozenset[str] | None = None,
    unignore_paths: frozenset[str] | None = None,
) -> list[Path]:
    paths = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or language_for_path(path) is None:
            continue
        if should_skip_path(path, root, exclude_paths, unignore_paths):
            continue
        paths.append(path)
    return paths


def read_source_file(path: Path, root: Path) -> SourceFile | None:
    language = language_for_path(path)
    if language is None:
        return None
    try:
        content = path.read_text(encoding=cs.ENCODING_UTF8, errors="replace")
    except OSError as e:
        logger.warning(ls.CORPUS_READ_FAILED.format(path=path, error=e))
        return None
    return SourceFile.from_text(to_posix(path.relative_to(root)), content, language)


def load_corpus(
    root: Path, exclude: frozenset[str] | None = None
) -> list[SourceFile]:
    """
    Reads every supported source file under a directory.

    Args:
        root (Path): The repository root. A single file is also accepted.
        exclude (frozenset[str] | None): Extra exclude globs, merged with the
            root's `.callmapignore`.

    Raises:
        CallmapError: If ``root`` does not exist.

    Returns:
        list[SourceFile]: The corpus, sorted by relative path.
    """
    if not root.exists():
        raise ex.CallmapError(ex.PATH_NOT_FOUND.format(path=root))

    if root.is_file():
        file = read_source_file(root, root.parent)
        return [file] if file is not None else []

    ignore = load_callmapignore_patterns(root)
    exclude_paths = (exclude or frozenset()) | ignore.exclude
    paths = iter_source_paths(root, exclude_paths or None, ignore.unignore or None)
    files = [
        file for path in paths if (file := read_source_file(path, root)) is not None
    ]
    logger.info(ls.CORPUS_LOADED.format(count=len(files), path=root))
    return files
