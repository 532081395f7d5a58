"""CLI entrypoint for the workflow orchestrator.

Exit codes:
    0  success (workflow completed / all services healthy)
    1  workflow halted, services degraded, or an unexpected failure
    2  invalid invocation or configuration
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from medical_mirror_orchestrator import __version__
from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings
from medical_mirror_orchestrator.orchestrator.logging import configure_logging
from medical_mirror_orchestrator.orchestrator.runtime import Orchestrator
from medical_mirror_orchestrator.orchestrator.services.health import overall_status
from medical_mirror_orchestrator.orchestrator.workflow.catalog import list_workflows
from medical_mirror_orchestrator.orchestrator.workflow.errors import (
    InvalidWorkflowError,
    WorkflowConfigurationError,
)

logger = logging.getLogger(__name__)


def _parse_context(pairs: list[str], raw_json: str | None) -> dict[str, Any]:
    context: dict[str, Any] = {}
    if raw_json:
        loaded = json.loads(raw_json)
        if not isinstance(loaded, dict):
            raise ValueError("--context-json must be a JSON object")
        context.update(loaded)
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --context value (expected KEY=VALUE): {pair}")
        context[key.strip()] = value
    return context


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="medmirror-orchestrator",
        description="Multi-step workflow orchestration across the Medical Mirror services",
    )
    parser.add_argument(
        "--version", action="version", version=f"medical-mirror-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("workflows", help="List the predefined workflows")

    run = subparsers.add_parser("run", help="Run a predefined or custom workflow")
    source = run.add_mutually_exclusive_group(required=True)
    source.add_argument("--workflow-id", default=None, help="Predefined workflow id")
    source.add_argument(
        "--workflow-file",
        type=Path,
        default=None,
        help="Path to a JSON file holding a custom workflow definition",
    )
    run.add_argument(
        "--context",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Initial context variable (repeatable)",
    )
    run.add_argument(
        "--context-json",
        default=None,
        help="Initial context as a JSON object (merged before --context pairs)",
    )

    subparsers.add_parser("health", help="Probe every collaborator service")

    serve = subparsers.add_parser("serve", help="Serve the REST API")
    serve.add_argument("--host", default=None, help="Bind address (default: ORCHESTRATOR_HOST)")
    serve.add_argument(
        "--port", type=int, default=None, help="Bind port (default: ORCHESTRATOR_PORT)"
    )

    return parser


async def _run_workflow(settings: OrchestratorSettings, args: argparse.Namespace) -> int:
    context = _parse_context(args.context, args.context_json)
    definition = None
    if args.workflow_file is not None:
        definition = json.loads(args.workflow_file.read_text(encoding="utf-8"))

    async with Orchestrator(settings) as orchestrator:
        workflow = orchestrator.resolve_workflow(
            workflow_id=args.workflow_id, workflow=definition, context=context
        )
        result = await orchestrator.run(workflow)

    _print_json({"workflow": workflow.name, **result.to_json()})
    return 0 if result.success else 1


async def _health(settings: OrchestratorSettings) -> int:
    async with Orchestrator(settings) as orchestrator:
        services = await orchestrator.services_health()

    status = overall_status(services)
    _print_json({"status": status, "services": {k: v.value for k, v in services.items()}})
    return 0 if status == "healthy" else 1


def _serve(settings: OrchestratorSettings, args: argparse.Namespace) -> int:
    import uvicorn

    from medical_mirror_orchestrator.server.app import create_app
    from medical_mirror_orchestrator.server.config import ServerSettings

    server_settings = ServerSettings()
    uvicorn.run(
        create_app(settings=settings, server_settings=server_settings),
        host=args.host or server_settings.host,
        port=args.port or server_settings.port,
        log_config=None,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = OrchestratorSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format, stream=sys.stderr)

    try:
        if args.command == "workflows":
            _print_json({"workflows": [entry.to_json() for entry in list_workflows()]})
            return 0

        if args.command == "run":
            # The hub connection is only needed for broadcasts; a one-shot run
            # still attempts it so claudeTeam steps and notifications work.
            return asyncio.run(_run_workflow(settings, args))

        if args.command == "health":
            return asyncio.run(_health(settings))

        if args.command == "serve":
            return _serve(settings, args)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (
        InvalidWorkflowError,
        WorkflowConfigurationError,
        ValidationError,
        json.JSONDecodeError,
        OSError,
        ValueError,
    ) as e:
        logger.error("Invalid invocation", extra={"command": args.command, "error": str(e)})
        print(f"Error: {e}", file=sys.stderr)
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
