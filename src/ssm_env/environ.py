from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Protocol, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class EnvironmentProvider(Protocol):
    def list_current(self) -> List[Tuple[str, str]]:
        ...

    def apply(self, name: str, value: str) -> None:
        ...


class OsEnviron:
    """Environment provider backed by ``os.environ``."""

    def list_current(self) -> List[Tuple[str, str]]:
        return list(os.environ.items())

    def apply(self, name: str, value: str) -> None:
        os.environ[name] = value


def load_env_file(path: Path) -> bool:
    """Merge a dotenv file into ``os.environ`` without overriding existing keys."""

    if not path.exists():
        raise FileNotFoundError(f"env file not found at {path}")
    loaded = load_dotenv(path, override=False)
    logger.debug("Loaded env file %s", path)
    return loaded
