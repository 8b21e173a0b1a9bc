from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from callmap.core import constants as cs
from callmap.core import logs
from callmap.infrastructure import exceptions as ex

load_dotenv()


class AppConfig(BaseSettings):
    """Analysis settings, loaded from environment variables or a .env file.

    Every field can be overridden with a ``CALLMAP_`` prefixed variable, e.g.
    ``CALLMAP_USE_AST_PARSER=false`` forces the heuristic JS/TS strategy.
    """

    model_config = SettingsConfigDict(
        env_prefix="CALLMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    MAX_SCAN_ITERATIONS: int = Field(default=cs.MAX_SCAN_ITERATIONS, ge=1)
    RUBY_FALLBACK_WINDOW: int = Field(default=cs.RUBY_FALLBACK_WINDOW, ge=0)
    JS_FALLBACK_WINDOW: int = Field(default=cs.JS_FALLBACK_WINDOW, ge=0)
    PARAM_SPLIT_MAX_LENGTH: int = Field(default=cs.PARAM_SPLIT_MAX_LENGTH, ge=1)
    PARAM_SPLIT_MAX_DEPTH: int = Field(default=cs.PARAM_SPLIT_MAX_DEPTH, ge=1)

    USE_AST_PARSER: bool = True
    ANALYSIS_WORKERS: int = 1

    QUIET: bool = False

    @field_validator("ANALYSIS_WORKERS")
    @classmethod
    def _workers_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError(ex.WORKERS_POSITIVE)
        return value

    def resolve_workers(self, workers: int | None) -> int:
        """Resolves the Phase 2 worker count.

        Args:
            workers (int | None): An explicit override, typically from the CLI.

        Raises:
            ValueError: If the resolved count is less than 1.

        Returns:
            int: The number of workers to use.
        """
        resolved = self.ANALYSIS_WORKERS if workers is None else workers
        if resolved < 1:
            raise ValueError(ex.WORKERS_POSITIVE)
        return resolved


settings = AppConfig()


@dataclass(frozen=True)
class IgnorePatterns:
    exclude: frozenset[str]
    unignore: frozenset[str]


EMPTY_IGNORE = IgnorePatterns(exclude=frozenset(), unignore=frozenset())


def load_callmapignore_patterns(repo_path: Path) -> IgnorePatterns:
    """Loads exclusion and inclusion patterns from a .callmapignore file.

    The file follows .gitignore conventions loosely: one glob per line, blank
    lines and ``#`` comments are skipped, ``!pattern`` re-includes a path.

    Args:
        repo_path (Path): The directory that holds the ignore file.

    Returns:
        IgnorePatterns: Exclude and unignore globs. Empty if the file does not
                        exist or cannot be read.
    """
    ignore_file = repo_path / cs.IGNORE_FILENAME
    if not ignore_file.is_file():
        return EMPTY_IGNORE

    exclude: set[str] = set()
    unignore: set[str] = set()
    try:
        with ignore_file.open(encoding=cs.ENCODING_UTF8) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("!"):
                    unignore.add(line[1:].strip())
                else:
                    exclude.add(line)
        if exclude or unignore:
            logger.info(
                logs.IGNORE_LOADED.format(exclude_count=len(exclude), path=ignore_file)
            )
        return IgnorePatterns(exclude=frozenset(exclude), unignore=frozenset(unignore))
    except OSError as e:
        logger.warning(logs.IGNORE_READ_FAILED.format(path=ignore_file, error=e))
        return EMPTY_IGNORE
