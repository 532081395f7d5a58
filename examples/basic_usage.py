#!/usr/bin/env python3
"""Programmatic workflow execution example.

This demonstrates using the orchestrator components directly:

* load settings from `.env`
* run a custom workflow (delay, condition, Observer analysis)
* print the structured workflow result

The patient id is passed as an argument and seeds the workflow context.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Sequence

from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings
from medical_mirror_orchestrator.orchestrator.logging import configure_logging
from medical_mirror_orchestrator.orchestrator.runtime import Orchestrator
from medical_mirror_orchestrator.orchestrator.workflow.models import Step, StepType, Workflow


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a custom workflow (programmatic example).")
    parser.add_argument("--patient-id", required=True, help="Patient id placed in the context")
    parser.add_argument(
        "--max-events",
        type=int,
        default=10,
        help="Number of recent events the Observer analysis should consider",
    )
    return parser.parse_args(argv)


def _build_workflow(max_events: int) -> Workflow:
    return Workflow(
        name="Patient Summary",
        steps=(
            Step(name="Settle", type=StepType.DELAY, params={"ms": 500}),
            Step(
                name="Patient selected?",
                type=StepType.CONDITION,
                params={"field": "patientId", "operator": "exists"},
            ),
            Step(
                name="Summarize recent activity",
                type=StepType.OBSERVER,
                action="analyze",
                params={
                    "provider": "claude",
                    "analysisType": "summary",
                    "maxEvents": max_events,
                    "filters": {"patientId": "{{patientId}}"},
                },
            ),
            Step(
                name="Share summary",
                type=StepType.CLAUDE_TEAM,
                action="broadcast",
                params={"message": "Summary ready for patient {{patientId}}"},
                optional=True,
            ),
        ),
    )


async def _run(settings: OrchestratorSettings, args: argparse.Namespace) -> int:
    workflow = _build_workflow(args.max_events)
    async with Orchestrator(settings) as orchestrator:
        result = await orchestrator.run(workflow.with_context({"patientId": args.patient_id}))

    print(json.dumps(result.to_json(), indent=2, default=str))
    return 0 if result.success else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = OrchestratorSettings()
    configure_logging(settings.log_level, "text", stream=sys.stderr)

    return asyncio.run(_run(settings, args))


if __name__ == "__main__":
    raise SystemExit(main())
