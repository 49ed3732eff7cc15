"""Command-line host for running native executables under a loader."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Sequence

from apploader.api.config import LoaderConfig, RestartMode, RestartType
from apploader.api.status import LoaderStatus
from apploader.native.process import create_process_module_factory
from apploader.runtime.capability import (
    default_capability_probe,
    permissive_capability_probe,
)
from apploader.runtime.display import MemoryContainer
from apploader.runtime.errors import LoaderConfigError
from apploader.runtime.lifecycle import ModuleLoader
from apploader.runtime.logging import setup_loader_logging, shutdown_loader_logging
from apploader.runtime.scheduler import AsyncioTaskQueue
from apploader.runtime.settings import enabled_capability_probe

_LOG = logging.getLogger("apploader.cli")


def _parse_env(values: Sequence[str]) -> dict[str, str]:
    env: dict[str, str] = {}
    for raw in values:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {raw!r}")
        env[key.strip()] = value
    return env


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apploader",
        description="Load, supervise and restart a natively-compiled application module.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser(
        "run",
        help="Run an executable under the loader",
        usage="apploader run [OPTIONS] EXECUTABLE [ARGS...]",
        description="Loader options go before EXECUTABLE; anything after it is passed through.",
    )
    run.add_argument("executable", help="Executable name, resolved against --path")
    run.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the executable unchanged",
    )
    run.add_argument("--path", default="", help="Path prefix for module files")
    run.add_argument(
        "--restart-mode",
        default=RestartMode.DO_NOT_RESTART.value,
        choices=[mode.value for mode in RestartMode],
    )
    run.add_argument(
        "--restart-type",
        default=RestartType.RESTART_MODULE.value,
        choices=[kind.value for kind in RestartType],
    )
    run.add_argument("--restart-limit", type=int, default=None)
    run.add_argument(
        "--env",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Environment variable for the module (repeatable)",
    )
    run.add_argument("--no-stdout", action="store_true", help="Drop module stdout")
    run.add_argument("--no-stderr", action="store_true", help="Drop module stderr")
    run.add_argument(
        "--skip-capability-probe",
        action="store_true",
        help="Treat the host as capable without probing",
    )

    sub.add_parser("probe", help="Print host capability flags as JSON")
    return parser


async def run_supervised(args: argparse.Namespace) -> int:
    """Run the executable until the loader settles without restarting."""
    loop = asyncio.get_running_loop()
    settled = asyncio.Event()
    loader: ModuleLoader | None = None

    def _check_settled() -> None:
        if loader is not None and loader.status in {LoaderStatus.EXITED, LoaderStatus.ERROR}:
            settled.set()

    def _on_status(status: LoaderStatus) -> None:
        _LOG.info("loader status=%s", status.value)
        if status is LoaderStatus.ERROR:
            settled.set()
        elif status is LoaderStatus.EXITED:
            # Restart commits are queued ahead of this check.
            loop.call_soon(_check_settled)

    skip_probe = args.skip_capability_probe or not enabled_capability_probe()
    probe = permissive_capability_probe() if skip_probe else default_capability_probe()
    loader = ModuleLoader(
        LoaderConfig(
            containers=(MemoryContainer(name="console"),),
            path_prefix=args.path,
            restart_mode=args.restart_mode,
            restart_type=args.restart_type,
            restart_limit=args.restart_limit,
            stdout_enabled=not args.no_stdout,
            stderr_enabled=not args.no_stderr,
            environment=_parse_env(args.env),
            status_changed=_on_status,
        ),
        task_queue=AsyncioTaskQueue(loop),
        capability_probe=probe,
    )
    loader.load_application(create_process_module_factory(args.executable, args.args))
    await settled.wait()
    snapshot = loader.snapshot
    if snapshot.status is LoaderStatus.ERROR:
        _LOG.error("loader error: %s", snapshot.error_text)
        return 1
    if snapshot.crashed:
        _LOG.error("module crashed: %s", snapshot.exit_text)
        return 1
    return int(snapshot.exit_code or 0)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_loader_logging()
    try:
        if args.command == "probe":
            probe = default_capability_probe()
            payload = {
                "execution_format": probe.supports_execution_format(),
                "accelerated_graphics": probe.supports_accelerated_graphics(),
                "can_run_application": probe.can_run_application(),
            }
            print(json.dumps(payload, ensure_ascii=True, indent=2))
            return 0
        try:
            return asyncio.run(run_supervised(args))
        except (LoaderConfigError, argparse.ArgumentTypeError) as exc:
            parser.error(str(exc))
            return 2
    finally:
        shutdown_loader_logging()


if __name__ == "__main__":
    raise SystemExit(main())
