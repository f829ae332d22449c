"""CLI entry point."""

from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from scaffold_graph.assembler import AssembledGraph, assemble
from scaffold_graph.collection import load_collection
from scaffold_graph.config.schema import Settings, get_default_settings
from scaffold_graph.errors import ConfigError, ScaffoldGraphError
from scaffold_graph.exporter import EXPORT_QUALITIES, export, write_snapshot
from scaffold_graph.hydra_utils import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_PATH,
    compose_config,
    export_quality_from_config,
    format_config,
    log_level_from_config,
    settings_from_config,
)
from scaffold_graph.logging_utils import (
    configure_logging,
    log_exception,
    run_with_error_handling,
)

logger = logging.getLogger(__name__)

_SUBCOMMANDS: Sequence[str] = (
    "help",
    "cfg",
    "render",
    "snapshot",
    "show",
)


def _cfg_handler(args: argparse.Namespace) -> None:
    cfg = compose_config(
        config_path=args.config_path,
        config_name=args.config_name,
        overrides=args.overrides,
    )
    print(format_config(cfg), end="")


def _load_config(args: argparse.Namespace) -> Optional[Any]:
    """Compose the config named by ``--config-path`` and apply its log level."""
    config_path = getattr(args, "config_path", None)
    if not config_path:
        return None
    if not Path(config_path).is_dir():
        raise ConfigError(
            f"Config directory not found: {config_path}",
            context={"config_path": str(config_path)},
        )
    cfg = compose_config(
        config_path=config_path,
        config_name=args.config_name,
        overrides=getattr(args, "overrides", None),
    )
    configure_logging(log_level_from_config(cfg))
    return cfg


def _load_settings(args: argparse.Namespace, cfg: Optional[Any] = None) -> Settings:
    if cfg is not None:
        settings = settings_from_config(cfg)
    else:
        settings = get_default_settings()
    render_changes: dict[str, Any] = {}
    if getattr(args, "no_labels", False):
        render_changes["label_nodes"] = False
    if getattr(args, "graph_id", None):
        render_changes["graph_id"] = args.graph_id
    if getattr(args, "size", None):
        render_changes["depiction_size"] = tuple(args.size)
    if render_changes:
        settings = settings.with_render(**render_changes)
    setting_changes: dict[str, Any] = {}
    if getattr(args, "backend", None):
        setting_changes["backend"] = args.backend
    if getattr(args, "temp_dir", None):
        setting_changes["temp_dir"] = Path(args.temp_dir)
    if setting_changes:
        settings = replace(settings, **setting_changes)
    return settings


def _resolve_quality(args: argparse.Namespace, cfg: Optional[Any] = None) -> str:
    if getattr(args, "quality", None):
        return args.quality
    if cfg is None:
        return "fast"
    quality = export_quality_from_config(cfg)
    if quality not in EXPORT_QUALITIES:
        raise ConfigError(
            f"export.quality must be one of {', '.join(EXPORT_QUALITIES)}; got {quality!r}."
        )
    return quality


def _assemble_from_args(
    args: argparse.Namespace, cfg: Optional[Any] = None
) -> tuple[AssembledGraph, Settings]:
    settings = _load_settings(args, cfg)
    collection = load_collection(Path(args.collection))
    graph = assemble(collection, settings.render, settings=settings)
    for failure in graph.depiction_failures:
        logger.warning("%s", failure)
    return graph, settings


def _render_handler(args: argparse.Namespace) -> None:
    cfg = _load_config(args)
    quality = _resolve_quality(args, cfg)
    graph, settings = _assemble_from_args(args, cfg)
    with graph:
        target = export(graph, args.output, quality, settings=settings)
    print(str(target))


def _snapshot_handler(args: argparse.Namespace) -> None:
    graph, _ = _assemble_from_args(args, _load_config(args))
    with graph:
        target = write_snapshot(graph, args.output)
    print(str(target))


def _show_handler(args: argparse.Namespace) -> None:
    from scaffold_graph.viewer import display

    graph, settings = _assemble_from_args(args, _load_config(args))
    with graph:
        figure = display(graph, settings=settings)
        if args.output:
            export(graph, args.output, "fast", settings=settings, figure=figure)


def _register_help_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    parser: argparse.ArgumentParser,
) -> None:
    def _handler(_args: argparse.Namespace) -> None:
        parser.print_help()

    help_parser = subparsers.add_parser(
        "help",
        help="Show top-level help.",
        description="Show top-level help.",
    )
    help_parser.set_defaults(handler=_handler)


def _add_config_arguments(parser: argparse.ArgumentParser, *, default_path: Optional[str]) -> None:
    parser.add_argument(
        "--config-path",
        default=default_path,
        help="Path to the Hydra config directory.",
    )
    parser.add_argument(
        "--config-name",
        default=DEFAULT_CONFIG_NAME,
        help="Hydra config name (without extension).",
    )


def _register_cfg_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    cfg_parser = subparsers.add_parser(
        "cfg",
        help="Compose and print Hydra config.",
        description="Compose and print Hydra config.",
    )
    _add_config_arguments(cfg_parser, default_path=DEFAULT_CONFIG_PATH)
    cfg_parser.add_argument(
        "overrides",
        nargs=argparse.REMAINDER,
        help="Hydra overrides (ex: render.label_nodes=false display.dpi=150).",
    )
    cfg_parser.set_defaults(handler=_cfg_handler)


def _add_collection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "collection",
        help="Collection snapshot (JSON/YAML with 'matrix' and 'nodes').",
    )
    _add_config_arguments(parser, default_path=None)
    parser.add_argument("--no-labels", action="store_true", help="Do not label nodes.")
    parser.add_argument("--graph-id", help="Identifier of the assembled graph.")
    parser.add_argument(
        "--size",
        nargs=2,
        type=int,
        metavar=("WIDTH", "HEIGHT"),
        help="Depiction size in pixels.",
    )
    parser.add_argument("--temp-dir", help="Directory for temporary depiction files.")


def _register_render_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    render_parser = subparsers.add_parser(
        "render",
        help="Assemble a collection and export it as an image.",
        description="Assemble a collection and export it as an image.",
    )
    _add_collection_arguments(render_parser)
    render_parser.add_argument("output", help="Image file to write (PNG or JPEG).")
    render_parser.add_argument(
        "--quality",
        choices=EXPORT_QUALITIES,
        default=None,
        help=(
            "fast: single screen-resolution render; high: full layout at 4K "
            "(default: export.quality from the config, else fast)."
        ),
    )
    render_parser.set_defaults(handler=_render_handler)


def _register_snapshot_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Assemble a collection and write its node-link JSON.",
        description="Assemble a collection and write its node-link JSON.",
    )
    _add_collection_arguments(snapshot_parser)
    snapshot_parser.add_argument("output", help="JSON file to write.")
    snapshot_parser.set_defaults(handler=_snapshot_handler)


def _register_show_subcommand(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
) -> None:
    show_parser = subparsers.add_parser(
        "show",
        help="Assemble a collection and display it.",
        description="Assemble a collection and display it.",
    )
    _add_collection_arguments(show_parser)
    show_parser.add_argument("--backend", help="Display backend (agg or tkagg).")
    show_parser.add_argument("--output", help="Also save a fast screenshot here.")
    show_parser.set_defaults(handler=_show_handler)


def _build_parser(subcommands: Iterable[str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scaffold-graph",
        description="Render scaffold trees and networks as graphs.",
    )
    parser.add_argument(
        "--traceback",
        action="store_true",
        help="Show full traceback on errors.",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for name in subcommands:
        if name == "help":
            _register_help_subcommand(subparsers, parser)
        elif name == "cfg":
            _register_cfg_subcommand(subparsers)
        elif name == "render":
            _register_render_subcommand(subparsers)
        elif name == "snapshot":
            _register_snapshot_subcommand(subparsers)
        elif name == "show":
            _register_show_subcommand(subparsers)
    return parser


def _cli_main(
    *,
    cli_logger: logging.Logger,
    argv: Optional[Sequence[str]] = None,
) -> None:
    parser = _build_parser(_SUBCOMMANDS)
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        parser.print_help()
        raise SystemExit(2)
    try:
        args.handler(args)
    except ScaffoldGraphError as exc:
        log_exception(cli_logger, exc, show_traceback=args.traceback)
        raise SystemExit(1) from None


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point with standard logging/error handling."""
    cli_logger = configure_logging()
    run_with_error_handling(_cli_main, logger=cli_logger, cli_logger=cli_logger, argv=argv)


if __name__ == "__main__":
    main()
