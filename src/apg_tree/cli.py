"""CLI entry point using Click."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from apg_tree.config import (
    TreeDataError,
    dump_tree,
    get_tree_settings,
    initial_expanded_ids,
    load_settings,
    load_tree,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class _DefaultGroup(click.Group):
    """Insert 'run' when the first arg is not a registered subcommand."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.no_args_is_help = False

    def resolve_command(self, ctx, args):
        cmd_name = args[0] if args else None
        if cmd_name and cmd_name in self.commands:
            return super().resolve_command(ctx, args)
        return super().resolve_command(ctx, ["run"] + list(args))


def configure_logging(level: str, log_file: str | None) -> None:
    """Send log records to the Textual devtools console and optionally a file."""
    from textual.logging import TextualHandler

    handlers: list[logging.Handler] = [TextualHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


def _load_or_exit(path: Path):
    if not path.is_file():
        click.echo(f"Error: '{path}' is not a file.", err=True)
        raise SystemExit(1)
    try:
        return load_tree(path)
    except TreeDataError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@click.group(
    cls=_DefaultGroup,
    invoke_without_command=True,
    context_settings={"ignore_unknown_options": True},
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Logging threshold.",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also log to this file.")
@click.version_option(package_name="tui-apg-tree")
@click.pass_context
def main(ctx, log_level: str, log_file: str | None) -> None:
    """APG Tree - keyboard-accessible tree view for the terminal."""
    ctx.ensure_object(dict)
    configure_logging(log_level.upper(), log_file)
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@main.command()
@click.argument("path", required=False, type=click.Path(path_type=Path))
@click.option("--demo", is_flag=True, help="Open the bundled demo tree.")
@click.option("--multi/--single", "multiselectable", default=None, help="Selection mode.")
@click.option("--timeout", "type_ahead_timeout", type=click.IntRange(min=0), default=None,
              help="Type-ahead reset timeout in ms.")
@click.option("--expand-depth", type=click.IntRange(min=0), default=None,
              help="Levels expanded on open.")
def run(
    path: Path | None = None,
    demo: bool = False,
    multiselectable: bool | None = None,
    type_ahead_timeout: int | None = None,
    expand_depth: int | None = None,
) -> None:
    """Open a tree file (YAML, TOML or JSON) in the tree view."""
    from apg_tree.app import TreeViewApp

    if demo or path is None:
        from apg_tree.demo_data import get_demo_nodes

        nodes = get_demo_nodes()
        settings = get_tree_settings(load_settings())
        source_name = "demo"
    else:
        path = path.resolve()
        nodes = _load_or_exit(path)
        settings = get_tree_settings(load_settings(path.parent))
        source_name = path.name

    if multiselectable is not None:
        settings.multiselectable = multiselectable
    if type_ahead_timeout is not None:
        settings.type_ahead_timeout = type_ahead_timeout
    if expand_depth is not None:
        settings.expand_depth = expand_depth

    app = TreeViewApp(nodes, settings=settings, source_name=source_name)
    app.run()


@main.command("dump")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--expand-depth", type=click.IntRange(min=0), default=None,
              help="Only print rows visible with this many levels expanded (default: all).")
def dump_cmd(path: Path, expand_depth: int | None) -> None:
    """Print the flattened tree, one row per node."""
    from apg_tree.engine import TreeViewEngine
    from apg_tree.flatten import flatten_tree

    nodes = _load_or_exit(path)
    if expand_depth is None:
        expanded = [fn.id for fn in flatten_tree(nodes) if fn.has_children]
    else:
        expanded = initial_expanded_ids(nodes, expand_depth)
    engine = TreeViewEngine(nodes, default_expanded_ids=expanded)

    for flat_node in engine.visible_nodes:
        if flat_node.has_children:
            marker = "-" if engine.is_expanded(flat_node.id) else "+"
        else:
            marker = " "
        suffix = " (disabled)" if flat_node.disabled else ""
        click.echo(f"{'  ' * flat_node.depth}{marker} {flat_node.node.label} [{flat_node.id}]{suffix}")
    engine.close()


@main.command("init")
@click.argument("path", default="tree.yaml", type=click.Path(path_type=Path))
@click.option("--name", prompt="Root label", default="Project", help="Label of the root node.")
def init_cmd(path: Path, name: str) -> None:
    """Write a sample tree file (format chosen by suffix)."""
    from apg_tree.demo_data import build_sample_tree

    if path.exists():
        click.echo(f"Already exists: {path}", err=True)
        raise SystemExit(1)
    try:
        dump_tree(build_sample_tree(name), path)
    except TreeDataError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    click.echo(f"Created {path}")
