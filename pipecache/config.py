"""Global configuration management for pipecache."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from contextlib import contextmanager
from contextvars import ContextVar
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict

from dotenv import find_dotenv, load_dotenv

from .text import Messages

DEFAULT_CONFIG_DIR = Path(os.path.expanduser("~")) / ".pipecache"
CONFIG_DIR = DEFAULT_CONFIG_DIR
CONFIG_FILE = CONFIG_DIR / "config.json"
_CONFIG_DIR_OVERRIDE: ContextVar[Path | None] = ContextVar(
    "pipecache_config_dir_override",
    default=None,
)
DEFAULT_LOAD_PATHS: tuple[str, ...] = (".",)
DEFAULT_DIGEST_ALGORITHM = "sha256"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_OUTPUT_DIR = "public/assets"
SUPPORTED_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")
ENV_ROOT = "PIPECACHE_ROOT"
ENV_LOG_LEVEL = "PIPECACHE_LOG_LEVEL"


@dataclass
class Config:
    root: str | None = None
    load_paths: tuple[str, ...] = DEFAULT_LOAD_PATHS
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM
    log_level: str = DEFAULT_LOG_LEVEL
    output_dir: str = DEFAULT_OUTPUT_DIR
    gzip: bool = False


def _resolve_config_dir() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    return override if override is not None else CONFIG_DIR


def _resolve_config_file() -> Path:
    override = _CONFIG_DIR_OVERRIDE.get()
    if override is not None:
        return override / "config.json"
    return CONFIG_FILE


@contextmanager
def config_dir_context(path: Path | str | None):
    """Temporarily override the config directory for the current context."""

    if path is None:
        yield
        return
    dir_path = Path(path).expanduser().resolve()
    if dir_path.exists() and not dir_path.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {dir_path}")
    token = _CONFIG_DIR_OVERRIDE.set(dir_path)
    try:
        yield
    finally:
        _CONFIG_DIR_OVERRIDE.reset(token)


def set_config_dir(path: Path | str | None) -> None:
    global CONFIG_DIR, CONFIG_FILE
    if path is None:
        CONFIG_DIR = DEFAULT_CONFIG_DIR
    else:
        dir_path = Path(path).expanduser().resolve()
        if dir_path.exists() and not dir_path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {dir_path}")
        CONFIG_DIR = dir_path
    CONFIG_FILE = CONFIG_DIR / "config.json"


def load_config() -> Config:
    config_file = _resolve_config_file()
    config = Config()
    if config_file.exists():
        raw = json.loads(config_file.read_text(encoding="utf-8"))
        _apply_config_payload(config, _coerce_config_payload(raw))
    return config


def save_config(config: Config) -> None:
    config_dir = _resolve_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config.root:
        data["root"] = config.root
    data["load_paths"] = list(config.load_paths)
    data["digest_algorithm"] = config.digest_algorithm
    data["log_level"] = config.log_level
    data["output_dir"] = config.output_dir
    data["gzip"] = bool(config.gzip)
    config_file = _resolve_config_file()
    config_file.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def apply_env_overrides(config: Config) -> Config:
    """Apply ``PIPECACHE_*`` variables, reading a ``.env`` file from the cwd first."""

    load_dotenv(find_dotenv(usecwd=True))
    root = (os.environ.get(ENV_ROOT) or "").strip()
    if root:
        config.root = root
    level = (os.environ.get(ENV_LOG_LEVEL) or "").strip()
    if level:
        config.log_level = _normalize_log_level(level)
    return config


def resolve_root(config: Config) -> Path:
    return Path(config.root or os.getcwd()).expanduser().resolve()


def set_root(value: str | None) -> None:
    config = load_config()
    config.root = _coerce_optional_str(value, "root")
    save_config(config)


def set_load_paths(values: list[str] | tuple[str, ...]) -> None:
    config = load_config()
    config.load_paths = _coerce_load_paths(values)
    save_config(config)


def set_digest_algorithm(value: str) -> None:
    config = load_config()
    config.digest_algorithm = _normalize_digest_algorithm(value)
    save_config(config)


def set_log_level(value: str) -> None:
    config = load_config()
    config.log_level = _normalize_log_level(value)
    save_config(config)


def set_output_dir(value: str) -> None:
    config = load_config()
    config.output_dir = _coerce_required_str(value, "output_dir", DEFAULT_OUTPUT_DIR)
    save_config(config)


def set_gzip(value: bool) -> None:
    config = load_config()
    config.gzip = bool(value)
    save_config(config)


def _coerce_config_payload(payload: object) -> Mapping[str, object]:
    if not isinstance(payload, Mapping):
        raise ValueError(Messages.ERROR_CONFIG_JSON_INVALID)
    return payload


def _apply_config_payload(config: Config, payload: Mapping[str, object]) -> None:
    if "root" in payload:
        config.root = _coerce_optional_str(payload["root"], "root")
    if "load_paths" in payload:
        config.load_paths = _coerce_load_paths(payload["load_paths"])
    if "digest_algorithm" in payload:
        config.digest_algorithm = _normalize_digest_algorithm(payload["digest_algorithm"])
    if "log_level" in payload:
        config.log_level = _normalize_log_level(payload["log_level"])
    if "output_dir" in payload:
        config.output_dir = _coerce_required_str(
            payload["output_dir"], "output_dir", DEFAULT_OUTPUT_DIR
        )
    if "gzip" in payload:
        config.gzip = _coerce_bool(payload["gzip"], "gzip")


def _coerce_optional_str(value: object, field: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or None
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_required_str(value: object, field: str, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned or default
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"true", "1", "yes", "on"}:
            return True
        if cleaned in {"false", "0", "no", "off"}:
            return False
    raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field=field))


def _coerce_load_paths(value: object) -> tuple[str, ...]:
    if value is None:
        return DEFAULT_LOAD_PATHS
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="load_paths"))
    cleaned: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(Messages.ERROR_CONFIG_VALUE_INVALID.format(field="load_paths"))
        token = item.strip()
        if token and token not in cleaned:
            cleaned.append(token)
    return tuple(cleaned) or DEFAULT_LOAD_PATHS


def _normalize_digest_algorithm(value: object) -> str:
    if value is None:
        return DEFAULT_DIGEST_ALGORITHM
    if isinstance(value, str):
        normalized = value.strip().lower() or DEFAULT_DIGEST_ALGORITHM
        if normalized in hashlib.algorithms_available:
            return normalized
    raise ValueError(Messages.ERROR_DIGEST_INVALID.format(value=value))


def _normalize_log_level(value: object) -> str:
    if value is None:
        return DEFAULT_LOG_LEVEL
    if isinstance(value, str):
        normalized = value.strip().upper() or DEFAULT_LOG_LEVEL
        if normalized == "WARN":
            normalized = "WARNING"
        if normalized in SUPPORTED_LOG_LEVELS:
            return normalized
    raise ValueError(
        Messages.ERROR_LOG_LEVEL_INVALID.format(
            value=value,
            allowed=", ".join(SUPPORTED_LOG_LEVELS),
        )
    )
