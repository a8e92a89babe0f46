"""Entry point for the rail layout chain builder."""

import argparse
from dataclasses import replace
import logging
import os
import sys

from rail_layout.core.config_backend import ConfigBackend
from rail_layout.core.config_store import (
    ConfigStore,
    current_config,
    set_config_store,
    validate_config,
)
from rail_layout.geometry.snap import PortNotFoundError
from rail_layout.model.catalog import PieceCatalog, build_catalog
from rail_layout.model.invariants import validate_layout
from rail_layout.model.layout_store import LayoutStore
from rail_layout.model.pieces import PlacedPiece

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = ["curve45"] * 8


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Chain track pieces entry-to-exit and report the connections."
    )
    parser.add_argument(
        "pieces",
        nargs="*",
        default=DEFAULT_CHAIN,
        help=(
            "Piece specs NAME[:EXIT_PORT], e.g. curve45 or turnout:C. "
            "Defaults to eight curve45 pieces."
        ),
    )
    parser.add_argument(
        "--config",
        default=os.getenv("RAIL_LAYOUT_CONFIG"),
        help="Path to rail_layout.ini. Defaults to RAIL_LAYOUT_CONFIG or the executable folder.",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Coincidence tolerance in mm, overriding the configured value.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("RAIL_LAYOUT_LOG_LEVEL", "INFO"),
        help=(
            "Logging level (e.g. DEBUG, INFO). Defaults to RAIL_LAYOUT_LOG_LEVEL "
            "environment variable or INFO."
        ),
    )
    parser.add_argument(
        "--log-file",
        default=os.getenv("RAIL_LAYOUT_LOG_PATH"),
        help="Optional log file path. Defaults to rail_layout_log.txt next to the executable.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )
    return parser.parse_args(argv)


def configure_logging(log_level_name: str, log_path: str | None) -> str:
    resolved_level_name = log_level_name.upper()
    log_level = getattr(logging, resolved_level_name, logging.INFO)

    if not log_path:
        base_dir = os.path.dirname(sys.argv[0])
        log_path = os.path.join(base_dir, "rail_layout_log.txt")

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a", encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )

    return log_path


def parse_piece_spec(spec: str, catalog: PieceCatalog) -> tuple[str, str | None]:
    """Split ``NAME[:EXIT_PORT]`` and check the name against the catalog."""

    name, _, exit_port = spec.partition(":")
    if name not in catalog:
        known = ", ".join(catalog)
        raise ValueError(f"Unknown piece '{name}'. Known pieces: {known}")
    return name, exit_port or None


def build_chain(
    specs: list[str],
    catalog: PieceCatalog,
    layout: LayoutStore,
    tolerance: float | None = None,
) -> list[PlacedPiece]:
    """Place each piece with its first port on the previous piece's exit port.

    The exit port defaults to the second port of each definition. A given
    ``tolerance`` replaces the configured coincidence tolerance for every
    placement in the chain.
    """

    if tolerance is not None:
        validate_config(replace(current_config(), coincidence_tolerance=tolerance))

    placed: list[PlacedPiece] = []
    previous: PlacedPiece | None = None
    previous_exit: str | None = None

    for index, spec in enumerate(specs):
        name, exit_port = parse_piece_spec(spec, catalog)
        definition = catalog[name]
        piece_id = f"{name}-{index}"
        entry_port = definition.ports[0].id

        if previous is None:
            piece = layout.place_piece(
                definition, (0.0, 0.0), 0, piece_id=piece_id, tolerance=tolerance
            )
        else:
            piece = layout.snap_piece(
                definition,
                entry_port,
                previous.id,
                previous_exit,
                piece_id=piece_id,
                tolerance=tolerance,
            )

        previous_exit = exit_port or definition.ports[min(1, len(definition.ports) - 1)].id
        if definition.find_port(previous_exit) is None:
            raise PortNotFoundError(f"Port not found: '{previous_exit}' on {name}")
        placed.append(piece)
        previous = piece

    return placed


def format_piece(piece: PlacedPiece) -> str:
    x, y = piece.position
    links = ", ".join(f"{port}->{ref}" for port, ref in sorted(piece.connections.items()))
    return f"{piece.id:<20} ({x:9.2f}, {y:9.2f}) rot {piece.rotation:3d}  {links or '-'}"


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log_level_name = "DEBUG" if args.debug else args.log_level
    log_path = configure_logging(log_level_name, args.log_file)
    logger.info("Starting rail layout (log level %s, log file %s)", log_level_name.upper(), log_path)

    store = ConfigStore(ConfigBackend(args.config))
    set_config_store(store)
    catalog = build_catalog(store.config)
    layout = LayoutStore()

    try:
        placed = build_chain(args.pieces, catalog, layout, args.tolerance)
    except (ValueError, PortNotFoundError) as exc:
        logger.error("%s", exc)
        return 2

    validate_layout(layout.pieces)

    for piece in placed:
        print(format_piece(piece))

    first, last = placed[0], placed[-1]
    entry_ref = first.connections.get(first.definition.ports[0].id, "")
    if len(placed) > 1 and entry_ref.startswith(f"{last.id}:"):
        print("Chain closes on itself.")
    else:
        print("Chain is open.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
