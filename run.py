"""KeyDungeon CLI entry point.

Provides subcommands for generating a dungeon, printing its solution and
running the JSON API server. Accepts configuration via flags and
KEYDUNGEON_* environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import signal
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

from keydungeon import __version__
from keydungeon.dungeon import ConfigurationError, DungeonBuilder, DungeonConfig
from keydungeon.dungeon.config import parse_locks

_color_init()
# Disable colors if output is not a real terminal (e.g., during pytest capture)
_COLOR_ENABLED = sys.stdout.isatty()


def _add_generation_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--seed", type=int, default=None, help="Seed (default: env KEYDUNGEON_SEED or random)")
    p.add_argument("--rooms", type=int, nargs=2, metavar=("MIN", "MAX"), help="Rooms per layer range")
    p.add_argument("--layers", type=int, nargs=2, metavar=("MIN", "MAX"), help="Layer count range")
    p.add_argument("--adjacency", default=None, help="orthogonal (4) or octile (8)")
    p.add_argument("--locks", default=None, help="Locks per layer: count (2) or fraction (0.5)")
    p.add_argument("--start", type=int, nargs=2, metavar=("X", "Y"), help="Start coordinate override")
    p.add_argument("--width", type=int, default=None, help="Grid width bound (requires --height)")
    p.add_argument("--height", type=int, default=None, help="Grid height bound (requires --width)")
    p.add_argument("--no-shortcuts", action="store_true", help="Skip shortcut connections")
    p.add_argument("--no-same-layer", action="store_true", help="Skip extra same-layer connections")


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    KeyDungeon generator

    Generate layered lock-and-key dungeons from a seed, print their solution,
    or serve them as JSON over HTTP. CLI flags take precedence over
    KEYDUNGEON_* environment variables.
    """

    epilog = dedent(
        """
        Environment variables:
          KEYDUNGEON_SEED              Default seed
          KEYDUNGEON_ROOMS_MIN/MAX     Rooms per layer range
          KEYDUNGEON_LAYERS_MIN/MAX    Layer count range
          KEYDUNGEON_ADJACENCY         orthogonal | octile
          KEYDUNGEON_LOCKS_PER_LAYER   count or fraction
          KEYDUNGEON_LOG_LEVEL         debug | info | warn | error
          HOST / PORT                  Server bind address (default 0.0.0.0:5000)

        Examples:
          # Reproducible dungeon summary
          python run.py generate --seed 42 --rooms 3 3 --layers 2 2

          # Full JSON graph
          python run.py generate --seed 42 --json

          # Traversal order that collects every key
          python run.py solve --seed 42

          # Serve /api/dungeon on port 8080
          python run.py server --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="keydungeon",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--env-file", dest="env_file", help="Path to a .env file to load before processing flags")
    parser.add_argument("--version", action="version", version=f"KeyDungeon {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    gen_parser = subparsers.add_parser("generate", help="Generate a dungeon and print it")
    _add_generation_flags(gen_parser)
    gen_parser.add_argument("--json", action="store_true", help="Print the full JSON graph")
    gen_parser.set_defaults(command="generate")

    solve_parser = subparsers.add_parser("solve", help="Generate a dungeon and print its traversal order")
    _add_generation_flags(solve_parser)
    solve_parser.add_argument("--json", action="store_true", help="Print the solution as JSON")
    solve_parser.set_defaults(command="solve")

    server_parser = subparsers.add_parser("server", help="Run the JSON API server")
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    server_parser.set_defaults(command="server")

    # If no subcommand provided, default to generate
    if len(argv) == 0:
        argv = ["generate"]

    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> DungeonConfig:
    cfg = DungeonConfig.from_env(seed=args.seed, adjacency=args.adjacency)
    if args.rooms:
        cfg.rooms_per_layer_range = tuple(args.rooms)
    if args.layers:
        cfg.layer_count_range = tuple(args.layers)
    if args.locks is not None:
        cfg.locks_per_layer = parse_locks(args.locks)
    if args.start:
        cfg.start_coordinate = tuple(args.start)
    if args.width is not None or args.height is not None:
        cfg.width, cfg.height = args.width, args.height
    if args.no_shortcuts:
        cfg.shortcuts = False
    if args.no_same_layer:
        cfg.same_layer_connections = False
    return cfg


def _label(text: str) -> str:
    return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def _value(val) -> str:
    return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)


def format_summary(dungeon) -> str:
    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    lines = [divider, f"  {_label('Seed:'):12} {_value(dungeon.seed)}", divider]
    for index, layer in enumerate(dungeon.layers):
        roles = sorted({r.role for r in layer} - {"normal"})
        tag = f" [{', '.join(roles)}]" if roles else ""
        lines.append(f"  {_label(f'Layer {index}:'):12} {_value(len(layer))} room(s){tag}")
    kinds = {}
    for c in dungeon.connections:
        kinds[c.kind] = kinds.get(c.kind, 0) + 1
    lines.append(
        f"  {_label('Edges:'):12} open={kinds.get('open', 0)} locked={kinds.get('locked', 0)} "
        f"shortcut={kinds.get('shortcut', 0)}"
    )
    for key in dungeon.keys:
        a, b = key.lock
        lines.append(f"  {_label('Key:'):12} {tuple(key.holder)} opens {tuple(a)}-{tuple(b)}")
    lines.append(f"  {_label('Start:'):12} {_value(tuple(dungeon.start_room.coord))}")
    lines.append(f"  {_label('Boss:'):12} {_value(tuple(dungeon.boss_room.coord))}")
    lines.append(divider)
    return "\n".join(lines)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        # Load default .env if present (no error if missing)
        load_dotenv()

    mode = (getattr(args, "command", None) or "generate").lower()

    if mode == "server":
        from keydungeon.server import start_server

        def handle_sigint(sig, frame):
            print("\n[INFO] Shutting down server...")
            sys.exit(0)

        signal.signal(signal.SIGINT, handle_sigint)
        host = args.host or os.getenv("HOST", "0.0.0.0")
        port = int(args.port or os.getenv("PORT", "5000"))
        debug = bool(args.debug or os.getenv("FLASK_DEBUG") == "1")
        start_server(host=host, port=port, debug=debug)
        return 0

    try:
        dungeon = DungeonBuilder(config_from_args(args)).build()
    except ConfigurationError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2

    if mode == "solve":
        solution = dungeon.solve()
        if args.json:
            print(json.dumps({"seed": dungeon.seed, **solution.to_dict()}))
        else:
            print(f"seed={dungeon.seed} solvable={solution.solvable}")
            for step, coord in enumerate(solution.order):
                room = dungeon.room_at(coord)
                picked = ", ".join(f"key{k.index}" for k in dungeon.keys_in(room))
                suffix = f"  pick up {picked}" if picked else ""
                print(f"{step:3d}. {tuple(coord)} layer={room.layer} {room.role}{suffix}")
        return 0

    if args.json:
        print(json.dumps(dungeon.to_dict()))
    else:
        print(format_summary(dungeon))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
