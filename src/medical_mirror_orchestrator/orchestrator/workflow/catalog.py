"""Predefined workflows."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import UnknownWorkflow
from .models import Step, StepType, Workflow

ATHENA_CAPTURE_ANALYZE = Workflow(
    name="Athena Capture & Analyze",
    steps=(
        Step(
            name="Navigate to Athena",
            type=StepType.BROWSER,
            action="navigate",
            params={"url": "{{athenaUrl}}"},
        ),
        Step(name="Wait for page load", type=StepType.DELAY, params={"ms": 2000}),
        Step(
            name="Capture patient data",
            type=StepType.BROWSER,
            action="athenaCapture",
            params={"dataTypes": ["all"], "patientId": "{{patientId}}"},
        ),
        Step(
            name="Store in Observer",
            type=StepType.OBSERVER,
            action="storeEvent",
            params={
                "type": "OBSERVER_TELEMETRY",
                "source": "athena-capture",
                "event": {
                    "stage": "athena_capture",
                    "action": "PATIENT_DATA_CAPTURED",
                    "success": True,
                    "data": "{{capturedData}}",
                },
            },
        ),
        Step(
            name="Run AI analysis",
            type=StepType.OBSERVER,
            action="analyze",
            params={"provider": "claude", "analysisType": "summary", "maxEvents": 10},
        ),
        Step(
            name="Notify team",
            type=StepType.CLAUDE_TEAM,
            action="broadcast",
            params={
                "message": "Athena capture complete for patient {{patientId}}",
                "category": "update",
            },
        ),
    ),
)

ANOMALY_MONITOR = Workflow(
    name="Anomaly Monitor",
    steps=(
        Step(
            name="Get recent events",
            type=StepType.OBSERVER,
            action="getEvents",
            params={"limit": 100, "success": "false"},
        ),
        Step(
            name="Analyze anomalies",
            type=StepType.OBSERVER,
            action="analyze",
            params={"provider": "claude", "analysisType": "anomaly", "maxEvents": 50},
        ),
        Step(
            name="Send to SCC",
            type=StepType.SCC,
            action="sendFeedback",
            params={
                "type": "AI_REMEDIATION",
                "system": "observer",
                "diagnosis": "{{analysisResult}}",
                "priority": "high",
            },
        ),
        Step(
            name="Alert team",
            type=StepType.CLAUDE_TEAM,
            action="broadcast",
            params={"message": "Anomaly detected: {{anomalySummary}}", "category": "heads_up"},
        ),
    ),
)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    workflow_id: str
    description: str
    required_context: tuple[str, ...]
    workflow: Workflow

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.workflow_id,
            "name": self.workflow.name,
            "description": self.description,
            "requiredContext": list(self.required_context),
        }


WORKFLOW_CATALOG: dict[str, CatalogEntry] = {
    "athena-capture-analyze": CatalogEntry(
        workflow_id="athena-capture-analyze",
        description="Navigate to Athena, capture patient data, analyze with AI",
        required_context=("athenaUrl", "patientId"),
        workflow=ATHENA_CAPTURE_ANALYZE,
    ),
    "anomaly-monitor": CatalogEntry(
        workflow_id="anomaly-monitor",
        description="Check for anomalies in telemetry and alert team",
        required_context=(),
        workflow=ANOMALY_MONITOR,
    ),
}


def list_workflows() -> list[CatalogEntry]:
    return list(WORKFLOW_CATALOG.values())


def get_workflow(workflow_id: str, context: Mapping[str, Any] | None = None) -> Workflow:
    """Return the predefined workflow seeded with `context`."""

    entry = WORKFLOW_CATALOG.get(workflow_id)
    if entry is None:
        raise UnknownWorkflow(workflow_id)
    return entry.workflow.with_context(context)
