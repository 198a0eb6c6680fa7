"""Command line interface for pipecache."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__, config as config_module
from .cache import clear_cache, list_cache_entries
from .config import Config, apply_env_overrides, load_config, resolve_root
from .errors import PipecacheError
from .log import configure_logging
from .output import format_freshness
from .services.cache_service import build_environment, check_asset
from .services.compile_service import CompileStatus, compile_asset
from .text import Messages, Styles
from .utils import format_path, resolve_directory

console = Console()

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"pipecache v{__version__}")
        raise typer.Exit()


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _fail(message: str) -> None:
    console.print(_styled(f"{Messages.ERROR_PREFIX}{message}", Styles.ERROR))
    raise typer.Exit(code=1)


def _format_updated(value: object) -> str:
    return str(value)[:19].replace("T", " ")


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _load_settings(root: Optional[Path]) -> Config:
    try:
        config = apply_env_overrides(load_config())
    except ValueError as exc:
        _fail(str(exc))
    candidate = root if root is not None else config.root
    if candidate:
        try:
            config.root = str(resolve_directory(candidate))
        except (FileNotFoundError, NotADirectoryError) as exc:
            _fail(str(exc))
    configure_logging(config.log_level)
    return config


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    )
) -> None:
    """Global Typer callback for shared options."""
    return None


@app.command("compile")
def compile_command(
    logical_path: str = typer.Argument(..., help=Messages.HELP_LOGICAL_PATH),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=Messages.HELP_ROOT),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help=Messages.HELP_OUTPUT),
    gzip: Optional[bool] = typer.Option(None, "--gzip/--no-gzip", help=Messages.HELP_GZIP),
    print_output: bool = typer.Option(False, "--print", "-p", help=Messages.HELP_PRINT),
) -> None:
    """Compile an asset, reusing cached work when its sources are unchanged."""
    config = _load_settings(root)
    compress = config.gzip if gzip is None else gzip
    try:
        env = build_environment(config)
        target_dir = output
        if target_dir is None and not print_output:
            target_dir = resolve_root(config) / config.output_dir
        result = compile_asset(env, logical_path, target_dir, compress=compress)
    except (PipecacheError, FileNotFoundError, NotADirectoryError) as exc:
        _fail(str(exc))

    count = len(result.artifact.required_artifacts)
    console.print(
        _styled(
            Messages.INFO_COMPILED.format(
                path=logical_path,
                count=count,
                plural="" if count == 1 else "s",
                size=len(result.body.encode("utf-8")),
            ),
            Styles.SUCCESS,
        )
    )
    if result.status is CompileStatus.WRITTEN and result.output_path is not None:
        console.print(
            _styled(
                Messages.INFO_WRITTEN.format(path=format_path(result.output_path, Path.cwd())),
                Styles.INFO,
            )
        )
    if print_output:
        sys.stdout.write(result.body)


@app.command()
def check(
    logical_path: str = typer.Argument(..., help=Messages.HELP_LOGICAL_PATH),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=Messages.HELP_ROOT),
) -> None:
    """Report whether the cached build of an asset is still fresh."""
    config = _load_settings(root)
    try:
        env = build_environment(config)
        report = check_asset(env, logical_path)
    except (PipecacheError, FileNotFoundError, NotADirectoryError) as exc:
        _fail(str(exc))

    if not report.cached:
        console.print(_styled(Messages.WARNING_NOT_CACHED.format(path=logical_path), Styles.WARNING))
        raise typer.Exit(code=1)

    base = Path(env.root)
    table = Table(
        title=Messages.TABLE_TITLE_CHECK.format(path=logical_path),
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_LOGICAL, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_KIND)
    table.add_column(Messages.TABLE_HEADER_STATUS)
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    for idx, dep in enumerate(report.dependencies, start=1):
        table.add_row(
            str(idx),
            dep.logical_path,
            dep.kind,
            format_freshness(dep.fresh, console),
            format_path(dep.path, base) if dep.path is not None else "-",
        )
    console.print(table)

    if report.fresh:
        console.print(_styled(Messages.INFO_FRESH.format(path=logical_path), Styles.SUCCESS))
        return
    console.print(_styled(Messages.WARNING_STALE.format(path=logical_path), Styles.WARNING))
    raise typer.Exit(code=1)


@app.command()
def cache(
    root: Optional[Path] = typer.Option(None, "--root", "-r", help=Messages.HELP_ROOT),
    list_entries: bool = typer.Option(False, "--list", "-l", help=Messages.HELP_CACHE_LIST),
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
) -> None:
    """Inspect or clear the persisted entry records."""
    config = _load_settings(root)
    project_root = resolve_root(config)
    display_root = str(project_root)

    if clear:
        removed = clear_cache(project_root)
        console.print(
            _styled(
                Messages.INFO_CACHE_CLEARED.format(
                    count=removed,
                    plural="y" if removed == 1 else "ies",
                    path=display_root,
                ),
                Styles.SUCCESS,
            )
        )
        if not list_entries:
            return

    entries = list_cache_entries(project_root)
    if not entries:
        console.print(_styled(Messages.INFO_CACHE_EMPTY.format(path=display_root), Styles.WARNING))
        return
    table = Table(
        title=Messages.TABLE_TITLE_CACHE.format(path=display_root),
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_LOGICAL, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_KIND)
    table.add_column(Messages.TABLE_HEADER_UPDATED)
    table.add_column(Messages.TABLE_HEADER_SIZE, justify="right")
    for idx, entry in enumerate(entries, start=1):
        table.add_row(
            str(idx),
            str(entry["key"]),
            str(entry["class"]),
            _format_updated(entry["updated_at"]),
            str(entry["size"]),
        )
    console.print(table)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
    set_root: Optional[Path] = typer.Option(None, "--set-root", help=Messages.HELP_SET_ROOT),
    clear_root: bool = typer.Option(False, "--clear-root", help=Messages.HELP_CLEAR_ROOT),
    set_load_path: Optional[List[str]] = typer.Option(
        None, "--set-load-path", help=Messages.HELP_SET_LOAD_PATH
    ),
    set_digest: Optional[str] = typer.Option(None, "--set-digest", help=Messages.HELP_SET_DIGEST),
    set_log_level: Optional[str] = typer.Option(
        None, "--set-log-level", help=Messages.HELP_SET_LOG_LEVEL
    ),
    set_output_dir: Optional[str] = typer.Option(
        None, "--set-output-dir", help=Messages.HELP_SET_OUTPUT_DIR
    ),
    set_gzip: Optional[str] = typer.Option(None, "--set-gzip", help=Messages.HELP_SET_GZIP),
) -> None:
    """Manage the stored pipecache configuration."""
    changed = False
    try:
        if set_root is not None:
            root_value = str(resolve_directory(set_root))
            config_module.set_root(root_value)
            console.print(_styled(Messages.INFO_ROOT_SET.format(value=root_value), Styles.SUCCESS))
            changed = True
        if clear_root:
            config_module.set_root(None)
            console.print(_styled(Messages.INFO_ROOT_CLEARED, Styles.SUCCESS))
            changed = True
        if set_load_path:
            config_module.set_load_paths(set_load_path)
            console.print(
                _styled(
                    Messages.INFO_LOAD_PATHS_SET.format(value=", ".join(set_load_path)),
                    Styles.SUCCESS,
                )
            )
            changed = True
        if set_digest is not None:
            config_module.set_digest_algorithm(set_digest)
            console.print(_styled(Messages.INFO_DIGEST_SET.format(value=set_digest), Styles.SUCCESS))
            changed = True
        if set_log_level is not None:
            config_module.set_log_level(set_log_level)
            console.print(
                _styled(Messages.INFO_LOG_LEVEL_SET.format(value=set_log_level), Styles.SUCCESS)
            )
            changed = True
        if set_output_dir is not None:
            config_module.set_output_dir(set_output_dir)
            console.print(
                _styled(Messages.INFO_OUTPUT_DIR_SET.format(value=set_output_dir), Styles.SUCCESS)
            )
            changed = True
        if set_gzip is not None:
            value = _parse_boolean(set_gzip)
            config_module.set_gzip(value)
            console.print(_styled(Messages.INFO_GZIP_SET.format(value=value), Styles.SUCCESS))
            changed = True
    except (ValueError, FileNotFoundError, NotADirectoryError) as exc:
        _fail(str(exc))

    if show or not changed:
        try:
            cfg = load_config()
        except ValueError as exc:
            _fail(str(exc))
        console.print(
            Messages.INFO_CONFIG_SUMMARY.format(
                root=cfg.root or "(current directory)",
                load_paths=", ".join(cfg.load_paths),
                digest=cfg.digest_algorithm,
                log_level=cfg.log_level,
                output_dir=cfg.output_dir,
                gzip="yes" if cfg.gzip else "no",
            )
        )


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
