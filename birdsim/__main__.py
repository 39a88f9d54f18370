"""Entry point: ``python -m birdsim``.

Supports two modes:
  - ``python -m birdsim``            → Launch the FastAPI control server
  - ``python -m birdsim cli``        → Headless run, optionally recorded to JSON

Settings come from the environment (see ``AppSettings.from_env``); flags
given on the command line win.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deterministic bird migration simulation")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI control server (default)")
    srv.add_argument("--host", type=str, default=None)
    srv.add_argument("--port", type=int, default=None)
    srv.add_argument("--seed", type=int, default=None)
    srv.add_argument("--db-path", type=str, default=None)
    srv.add_argument("--rules", type=str, default=None, choices=["zoned", "classic"])
    srv.add_argument("--log-level", type=str, default=None, choices=_LOG_LEVELS)

    # --- Headless CLI mode ---
    cli = sub.add_parser("cli", help="Run a headless simulation")
    cli.add_argument("--seed", type=int, default=None)
    cli.add_argument("--ticks", type=int, default=1000)
    cli.add_argument("--agents", type=int, default=None)
    cli.add_argument("--world-size", type=int, default=None)
    cli.add_argument("--time-step", type=int, default=1)
    cli.add_argument("--rules", type=str, default=None, choices=["zoned", "classic"])
    cli.add_argument("--out", type=str, default=None, help="Write a JSON replay to this path")
    cli.add_argument("--record-every", type=int, default=10)
    cli.add_argument("--log-level", type=str, default=None, choices=_LOG_LEVELS)

    return parser


def _settings(args: argparse.Namespace):
    from birdsim.config import AppSettings, BehaviorRules

    settings = AppSettings.from_env().with_overrides(
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        seed=args.seed,
        db_path=getattr(args, "db_path", None),
        log_level=args.log_level,
    )
    if args.rules == "classic":
        settings = replace(settings, rules=BehaviorRules.classic())
    elif args.rules == "zoned":
        settings = replace(settings, rules=BehaviorRules())
    return settings


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from birdsim.api.app import create_app

    settings = _settings(args)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def _run_cli(args: argparse.Namespace) -> None:
    from collections import Counter

    from birdsim.engine.world_loop import WorldLoop
    from birdsim.systems.generator import WorldGenerator
    from birdsim.utils.logging import setup_logging
    from birdsim.utils.replay import RunRecorder

    settings = _settings(args)
    config = settings.simulation.with_overrides(
        initial_agents=args.agents,
        world_size=args.world_size,
    )
    setup_logging(settings.log_level)

    world = WorldGenerator(settings.rules).generate(settings.seed, config, settings.environment)
    world.running = True
    loop = WorldLoop(world, settings.rules)

    recorder = RunRecorder(args.out, settings.seed, args.record_every) if args.out else None
    loop.run(args.ticks, time_step=args.time_step, recorder=recorder)

    states = Counter(a.state.value for a in world.agents)
    logger.info(
        "Done. tick=%d collisions=%d states=%s",
        world.tick, world.collision_count, dict(sorted(states.items())),
    )
    if args.out:
        logger.info("Replay written to %s", args.out)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None:
        args = parser.parse_args(["serve"])

    if args.command == "serve":
        _run_server(args)
    elif args.command == "cli":
        _run_cli(args)


if __name__ == "__main__":
    main()
