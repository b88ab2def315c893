#!/usr/bin/env python3
"""
pcbroute CLI

Command-line interface for the grid-based KiCad autorouter.

Usage:
    pcbroute route <board.kicad_pcb> --width W --height H [options]
    pcbroute inspect <board.kicad_pcb>

Exit codes:
    0  success
    1  board or settings could not be loaded
    2  routing finished with unrouted connections
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .board.errors import BoardError
from .board.loader import load_tree
from .board.model import BoardModel
from .sexpr import Tree

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNROUTED = 2


def setup_logging(verbose: bool = False):
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_board_from_path(board_arg: str) -> Tuple[Optional[Tree], Optional[BoardModel]]:
    """
    Load the tree and board model for a board file argument.

    Returns:
        (tree, board), or (None, None) after printing the error
    """
    try:
        tree = load_tree(board_arg)
        board = BoardModel.load(tree)
    except BoardError as e:
        print(f"Error: {e}")
        return None, None
    return tree, board


def cmd_route(args):
    """Route a board and save the result."""
    from .board.writer import save_routed_board
    from .routing import load_settings, route

    tree, board = load_board_from_path(args.board)
    if board is None:
        return EXIT_ERROR

    origin_x, origin_y = args.origin if args.origin else (None, None)
    try:
        settings = load_settings(
            args.config,
            board_width=args.width,
            board_height=args.height,
            grid_spacing=args.spacing,
            max_passes=args.passes,
            via_penalty=args.via_penalty,
            origin_x=origin_x,
            origin_y=origin_y,
        )
        result = route(board, settings)
    except BoardError as e:
        print(f"Error: {e}")
        return EXIT_ERROR

    summary = result.summary()
    print(f"Routed {summary['routed']}/{summary['routed'] + summary['unrouted']} connections "
          f"in {summary['passes']} pass(es)")
    print(f"  New wires: {summary['wires']}")
    print(f"  New vias: {summary['vias']}")

    for connection in result.unrouted:
        print(f"  Unrouted: {board.net_name(connection.net_id)} "
              f"{connection.source.abs_at} -> {connection.target.abs_at}")

    if not args.dry_run:
        if args.output:
            output_path = Path(args.output)
        else:
            output_path = Path(args.board).with_suffix(".routed.kicad_pcb")
        try:
            save_routed_board(tree, result, output_path)
        except OSError as e:
            print(f"Error: cannot write {output_path}: {e}")
            return EXIT_ERROR
        print(f"\nSaved to: {output_path}")

    return EXIT_OK if result.success else EXIT_UNROUTED


def cmd_inspect(args):
    """Print what the loader found in a board."""
    _, board = load_board_from_path(args.board)
    if board is None:
        return EXIT_ERROR

    summary = board.summary()
    print(f"Board: {args.board}")
    print(f"  Thickness: {board.general.thickness}")
    print(f"  Layers: {summary['layer_count']} ({summary['routable_layers']} routable)")
    for layer in board.layers:
        if layer.routable:
            print(f"    {layer.id}: {layer.name}")
    print(f"  Nets: {summary['net_count']}")
    print(f"  Footprints: {summary['footprint_count']}")
    print(f"  Pads: {summary['pad_count']}")
    print(f"  Wires: {summary['wire_count']}")
    print(f"  Vias: {summary['via_count']}")
    if summary["arc_count"]:
        print(f"  Arcs: {summary['arc_count']}")

    if board.diagnostics.total_dropped:
        print(f"  Dropped: {summary['dropped_nets']} net mention(s), "
              f"{summary['dropped_pads']} pad(s)")

    undeclared = board.undeclared_net_ids()
    if undeclared:
        print(f"  Undeclared net ids: {sorted(undeclared)}")

    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcbroute",
        description="pcbroute - Grid-based autorouter for KiCad boards",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pcbroute inspect board.kicad_pcb
  pcbroute route board.kicad_pcb --width 50 --height 40
  pcbroute route board.kicad_pcb --config routing.yaml -o routed.kicad_pcb
        """,
    )

    parser.add_argument("--version", action="version", version=f"pcbroute {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Route command
    route_parser = subparsers.add_parser("route", help="Route unconnected nets")
    route_parser.add_argument("board", help="Path to KiCad PCB file")
    route_parser.add_argument("-o", "--output",
                              help="Output file path (default: <board>.routed.kicad_pcb)")
    route_parser.add_argument("--config", help="YAML settings file")
    route_parser.add_argument("--width", type=float, help="Grid width in mm")
    route_parser.add_argument("--height", type=float, help="Grid height in mm")
    route_parser.add_argument("--spacing", type=float, help="Grid spacing in mm (default: 0.25)")
    route_parser.add_argument("--passes", type=int, help="Maximum routing passes (default: 3)")
    route_parser.add_argument("--via-penalty", type=float,
                              help="Cost of a layer change in grid steps (default: 10)")
    route_parser.add_argument("--origin", type=float, nargs=2, metavar=("X", "Y"),
                              help="Grid origin in board coordinates (default: 0 0)")
    route_parser.add_argument("--dry-run", action="store_true", help="Don't write output")
    route_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # Inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Show board contents")
    inspect_parser.add_argument("board", help="Path to KiCad PCB file")
    inspect_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    setup_logging(args.verbose)

    commands = {
        "route": cmd_route,
        "inspect": cmd_inspect,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
