from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from ..engine.geometry import Color
from ..protocol.console.loop import ConsoleSession, run_console
from ..search.engine import DEFAULT_DEPTH
from ..search.service import ENGINES, make_engine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ecochess", description="Economic chess engine")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    play = sub.add_parser("play", help="Play against the engine in the terminal")
    play.add_argument("--engine", default="simple", choices=sorted(ENGINES))
    play.add_argument("--depth", type=int, default=DEFAULT_DEPTH, help=f"Search depth (default: {DEFAULT_DEPTH})")
    play.add_argument(
        "--engine-color",
        default="b",
        choices=["w", "b", "none"],
        help="Side the engine plays, or 'none' for two humans (default: b)",
    )
    play.add_argument("--workers", type=int, default=None, help="Search threads (default: executor default)")
    play.add_argument("--no-color", action="store_true", help="Plain ASCII board")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command == "serve":
        uvicorn.run(
            "ecochess.protocol.http.app:create_app",
            factory=True,
            host=args.host,
            port=args.port,
            log_level=args.log_level.lower(),
        )
        return

    engine = None
    engine_color = None
    if args.engine_color != "none":
        engine = make_engine(args.engine, depth=args.depth, max_workers=args.workers)
        engine_color = Color(args.engine_color)
    run_console(ConsoleSession(engine=engine, engine_color=engine_color, color_output=not args.no_color))


if __name__ == "__main__":
    main()
