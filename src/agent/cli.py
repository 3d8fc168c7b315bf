"""CLI entrypoint for the field agent.

Boot sequence:
  1. Resolve the coordinator address (flag, env, boot media, or prompt)
  2. Load the persisted identity, or register once and persist it
  3. Poll the coordinator: execute one command, report, repeat
  4. Stop on Poweroff, or hand over to a freshly installed program on Update
"""

from __future__ import annotations

import argparse
import importlib
import logging
import os
import socket
import sys
import textwrap

from src.agent.actions import build_registry
from src.agent.backoff import Backoff
from src.agent.client import CoordinatorClient
from src.agent.config import AgentConfig, load_dotenv, read_bootstrap, resolve_config
from src.agent.drivers import Driver, SimulatedDriver
from src.agent.identity import FileIdentityStore, IdentityStore, RedisIdentityStore
from src.agent.loop import AgentLoop, State
from src.agent.updater import SelfUpdater, is_guarded
from src.common.console import banner, fail, info, ok, warn
from src.common.constants import UPDATE_GUARD_ARG
from src.common.logging import configure_structlog, get_json_file_logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Field agent: polls the coordinator and executes one command per round trip.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              python3 run_agent.py --coordinator 10.0.0.5
              python3 run_agent.py --simulate --state-dir /tmp/agent-1
              python3 run_agent.py --driver mybot.drivers:Robot --max-backoff 30
        """),
    )
    parser.add_argument(
        "guard", nargs="?", choices=[UPDATE_GUARD_ARG], default=None,
        help=argparse.SUPPRESS,
    )
    parser.add_argument("--coordinator", default=None, help="Coordinator host or IP")
    parser.add_argument("--port", type=int, default=None, help="Coordinator port (default 48228)")
    parser.add_argument("--state-dir", default=None, help="Directory for id, entry point and journal")
    parser.add_argument(
        "--identity-backend", choices=("file", "redis"), default="file",
        help="Where the identity record lives. Default: file",
    )
    parser.add_argument(
        "--agent-name", default=None,
        help="Key for the redis identity backend. Default: hostname",
    )
    parser.add_argument(
        "--max-backoff", type=float, default=None,
        help="Cap on the reconnect delay in seconds. Default: uncapped",
    )
    parser.add_argument(
        "--driver", default=None, metavar="MODULE:FACTORY",
        help="Import path of the hardware driver factory",
    )
    parser.add_argument("--simulate", action="store_true", help="Use the in-memory simulated driver")
    parser.add_argument("--json-logs", action="store_true", help="Emit console logs as JSON lines")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_driver(spec: str | None, simulate: bool) -> Driver:
    """Instantiate the driver named by ``module:factory``, or the simulator."""
    if simulate:
        return SimulatedDriver()
    if not spec:
        fail("No driver configured. Pass --driver MODULE:FACTORY or --simulate.")
    module_name, _, attr = spec.partition(":")
    try:
        factory = getattr(importlib.import_module(module_name), attr or "Driver")
    except (ImportError, AttributeError) as exc:
        fail(f"Cannot load driver {spec!r}: {exc}")
    return factory()


def _identity_store(config: AgentConfig, agent_name: str | None) -> IdentityStore:
    if config.identity_backend == "redis":
        return RedisIdentityStore(agent_name or socket.gethostname())
    return FileIdentityStore(config.state_dir)


def main(argv: list[str] | None = None) -> None:
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    args = _build_parser().parse_args(raw_argv)

    configure_structlog(logging.DEBUG if args.verbose else logging.INFO, json_output=args.json_logs)

    banner("Field Agent")
    if is_guarded(raw_argv, os.environ):
        info("Started by self-update (nested generation).")

    load_dotenv()
    config = resolve_config(args)
    info(f"Coordinator: {config.coordinator}:{config.port}")
    info(f"State dir:   {config.state_dir}")

    driver = load_driver(args.driver, config.simulate)
    client = CoordinatorClient(config.coordinator, config.port)
    updater = SelfUpdater(client, config.entry_point, config.backup)
    registry = build_registry(driver, updater, argv=raw_argv)

    loop = AgentLoop(
        client,
        registry,
        driver,
        _identity_store(config, args.agent_name),
        lambda: read_bootstrap(driver, config.disk_dir),
        backoff=Backoff(cap=config.max_backoff),
        journal=get_json_file_logger(config.journal),
    )

    try:
        final = loop.run()
    except KeyboardInterrupt:
        warn("Interrupted.")
        sys.exit(130)

    if final is State.TERMINATED:
        ok(f"Agent {loop.identity.id if loop.identity else '?'} stopped.")
