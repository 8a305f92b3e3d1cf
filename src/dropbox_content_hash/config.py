"""Command-line configuration — loads and validates config.yaml.

The file lives in ``~/.dropbox-content-hash/`` unless a path is given.
Environment variables override the file:

    DBX_HASH_WORKERS    worker threads (integer, or "auto")
    DBX_HASH_LOG_LEVEL  logging level name

If no config exists, create_default() writes a commented starter file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from dropbox_content_hash.errors import ConfigError

logger = logging.getLogger(__name__)

DOT_DIR = ".dropbox-content-hash"
ENV_WORKERS = "DBX_HASH_WORKERS"
ENV_LOG_LEVEL = "DBX_HASH_LOG_LEVEL"
KNOWN_KEYS = {"workers", "progress", "log_level"}


@dataclass
class HashConfig:
    """Parsed config.yaml."""

    workers: int = 1  # 1 = sequential ContentHasher
    progress: bool = True
    log_level: str = "WARNING"


_DEFAULT_CONFIG = """\
# dropbox-content-hash configuration

# Worker threads used to digest blocks.  1 hashes sequentially;
# "auto" (or 0) uses one thread per CPU.
workers: 1

# Show a percentage on stderr while reading a file.
progress: true

# Logging level for messages on stderr (DEBUG, INFO, WARNING, ERROR).
log_level: WARNING
"""


def home_dir() -> Path:
    """Return ~/.dropbox-content-hash/."""
    return Path.home() / DOT_DIR


def config_path(config_dir: Path) -> Path:
    """Path to config.yaml inside *config_dir*."""
    return config_dir / "config.yaml"


def create_default(config_dir: Path) -> Path:
    """Write a starter config.yaml if it doesn't exist. Returns the path."""
    p = config_path(config_dir)
    if not p.exists():
        config_dir.mkdir(parents=True, exist_ok=True)
        p.write_text(_DEFAULT_CONFIG, encoding="utf-8")
    return p


def parse_workers(value: object) -> int:
    """Validate a worker count.  ``"auto"`` and ``0`` mean one per CPU."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text == "auto":
            return os.cpu_count() or 1
        try:
            value = int(text)
        except ValueError:
            raise ConfigError(
                f"workers must be an integer or 'auto', got {value!r}"
            ) from None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(
            f"workers must be an integer >= 0 or 'auto', got {value!r}",
            hint="Use 1 for sequential hashing.",
        )
    if value == 0:
        return os.cpu_count() or 1
    return value


def parse_log_level(value: object) -> str:
    """Validate a logging level name and return it upper-cased."""
    if not isinstance(value, str) or not isinstance(
        logging.getLevelName(value.strip().upper()), int
    ):
        raise ConfigError(
            f"log_level must be a logging level name, got {value!r}",
            hint="Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL.",
        )
    return value.strip().upper()


def load_config(path: Path | None = None) -> HashConfig:
    """Load and validate config.yaml, then apply environment overrides.

    With no *path*, a missing default file yields defaults.  An explicit
    *path* that does not exist is an error.
    """
    if path is None:
        p = config_path(home_dir())
        if not p.exists():
            return _apply_env(HashConfig())
    else:
        p = path
        if not p.exists():
            raise ConfigError(
                f"config file {p} does not exist",
                hint="Check the --config path, or omit it to use defaults.",
            )

    raw = p.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"expected a YAML mapping in {p}, got {type(data).__name__}")

    unknown = sorted(set(data) - KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", p, ", ".join(map(str, unknown)))

    progress = data.get("progress", True)
    if not isinstance(progress, bool):
        raise ConfigError(f"progress must be true or false, got {progress!r}")

    cfg = HashConfig(
        workers=parse_workers(data.get("workers", 1)),
        progress=progress,
        log_level=parse_log_level(data.get("log_level", "WARNING")),
    )
    return _apply_env(cfg)


def _apply_env(cfg: HashConfig) -> HashConfig:
    workers = os.environ.get(ENV_WORKERS)
    if workers:
        cfg.workers = parse_workers(workers)
    level = os.environ.get(ENV_LOG_LEVEL)
    if level:
        cfg.log_level = parse_log_level(level)
    return cfg
