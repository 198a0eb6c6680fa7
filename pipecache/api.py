"""Public Python API for pipecache."""

from __future__ import annotations

from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import Sequence

from .cache import EntryStore, cache_dir_context, set_cache_dir
from .config import Config, apply_env_overrides, config_dir_context, load_config, set_config_dir
from .environment import Environment
from .services.cache_service import FreshnessReport, build_environment, check_asset
from .services.compile_service import CompileResult, compile_asset
from .utils import resolve_directory


@contextmanager
def _data_dir_context(
    data_dir: Path | str | None,
    *,
    config_dir: Path | str | None,
    cache_dir: Path | str | None,
):
    if data_dir is None and config_dir is None and cache_dir is None:
        yield
        return
    effective_config_dir = config_dir if config_dir is not None else data_dir
    effective_cache_dir = cache_dir if cache_dir is not None else data_dir
    with ExitStack() as stack:
        if effective_config_dir is not None:
            stack.enter_context(config_dir_context(effective_config_dir))
        if effective_cache_dir is not None:
            stack.enter_context(cache_dir_context(effective_cache_dir))
        yield


def set_data_dir(path: Path | str | None) -> None:
    """Set the base directory for config and cache data."""
    set_config_dir(path)
    set_cache_dir(path)


def open_environment(
    root: Path | str | None = None,
    *,
    load_paths: Sequence[str] | str | None = None,
    store: EntryStore | None = None,
) -> Environment:
    """Build an Environment from the stored config plus explicit overrides."""
    return build_environment(_resolve_settings(root, load_paths), store=store)


def compile_bundle(
    logical_path: str,
    *,
    root: Path | str | None = None,
    load_paths: Sequence[str] | str | None = None,
    output_dir: Path | str | None = None,
    compress: bool = False,
    store: EntryStore | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
) -> CompileResult:
    """Compile *logical_path*, reusing cached work, and optionally write the bundle."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        env = open_environment(root, load_paths=load_paths, store=store)
        return compile_asset(env, logical_path, output_dir, compress=compress)


def check(
    logical_path: str,
    *,
    root: Path | str | None = None,
    load_paths: Sequence[str] | str | None = None,
    store: EntryStore | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
) -> FreshnessReport:
    """Report whether the cached build of *logical_path* is still fresh."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        env = open_environment(root, load_paths=load_paths, store=store)
        return check_asset(env, logical_path)


def expire(
    logical_path: str,
    *,
    root: Path | str | None = None,
    load_paths: Sequence[str] | str | None = None,
    store: EntryStore | None = None,
    data_dir: Path | str | None = None,
    config_dir: Path | str | None = None,
    cache_dir: Path | str | None = None,
) -> bool:
    """Drop the stored record for *logical_path*; True when one existed."""
    with _data_dir_context(data_dir, config_dir=config_dir, cache_dir=cache_dir):
        env = open_environment(root, load_paths=load_paths, store=store)
        return env.expire(logical_path)


def _coerce_iterable(values: Sequence[str] | str | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def _resolve_settings(
    root: Path | str | None,
    load_paths: Sequence[str] | str | None,
) -> Config:
    config = apply_env_overrides(load_config())
    if root is not None:
        config.root = str(resolve_directory(root))
    paths = _coerce_iterable(load_paths)
    if paths:
        config.load_paths = paths
    return config
