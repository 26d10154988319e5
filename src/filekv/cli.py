"""filekv CLI: inspect and edit a store file from the shell.

Commands:
    filekv get PATH [KEY...]      print the table (or selected keys) as JSON
    filekv keys PATH              list stored keys, one per line
    filekv set PATH KEY VALUE     store VALUE (parsed as JSON, else a plain string)
    filekv remove PATH KEY...     delete keys
    filekv clear PATH             delete every key

Options come from filekv.toml / FILEKV_* env vars; --indent overrides both.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import click

from filekv.config import StoreOptions, load_options
from filekv.errors import StoreError
from filekv.store import Store

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open(ctx: click.Context, path: str) -> Store:
    options: StoreOptions = ctx.obj["options"]
    try:
        return Store(path, options)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc


def _commit(store: Store) -> None:
    """Write the table out (CLI stores never rely on background writes)."""
    try:
        store.sync()
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="filekv")
@click.option("--config", "config_root", default=None, help="Directory to search for filekv.toml")
@click.option("--indent", type=click.IntRange(min=0), default=None, help="JSON indentation for written files")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr")
@click.pass_context
def cli(ctx: click.Context, config_root: str | None, indent: int | None, verbose: bool) -> None:
    """filekv: single-file JSON key-value store."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        options = load_options(config_root)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    # Each command writes once, explicitly and synchronously.
    ctx.obj = {"options": options.merge(indent=indent, async_write=False, sync_on_write=False)}


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("path")
@click.argument("keys", nargs=-1)
@click.pass_context
def get(ctx: click.Context, path: str, keys: tuple[str, ...]) -> None:
    """Print the whole table, or just KEYS (missing keys print as null)."""
    store = _open(ctx, path)
    click.echo(json.dumps(store.get(*keys), indent=2, ensure_ascii=False))


@cli.command()
@click.argument("path")
@click.pass_context
def keys(ctx: click.Context, path: str) -> None:
    """List stored keys."""
    store = _open(ctx, path)
    for key in store.keys():
        click.echo(key)


# ---------------------------------------------------------------------------
# Write commands
# ---------------------------------------------------------------------------


@cli.command("set")
@click.argument("path")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_cmd(ctx: click.Context, path: str, key: str, value: str) -> None:
    """Store VALUE under KEY."""
    store = _open(ctx, path)
    store.set(key, _parse_value(value))
    _commit(store)
    click.echo(f"Set {key}")


@cli.command()
@click.argument("path")
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def remove(ctx: click.Context, path: str, keys: tuple[str, ...]) -> None:
    """Delete KEYS (absent keys are ignored)."""
    store = _open(ctx, path)
    missing = [k for k in keys if k not in store]
    store.remove(*keys)
    _commit(store)
    for k in missing:
        click.echo(f"  not found: {k}", err=True)
    click.echo(f"Removed {len(keys) - len(missing)} key(s)")


@cli.command()
@click.argument("path")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear(ctx: click.Context, path: str, yes: bool) -> None:
    """Delete every key."""
    store = _open(ctx, path)
    if not yes:
        click.confirm(f"Remove all {len(store)} key(s) from {path}?", abort=True)
    store.clear()
    _commit(store)
    click.echo("Cleared")
