"""Workflow orchestration REST API.

All routes are mounted under `/api/orchestrator`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from medical_mirror_orchestrator import __version__
from medical_mirror_orchestrator.orchestrator.runtime import Orchestrator
from medical_mirror_orchestrator.orchestrator.services.health import overall_status
from medical_mirror_orchestrator.orchestrator.workflow.catalog import (
    WORKFLOW_CATALOG,
    list_workflows,
)
from medical_mirror_orchestrator.orchestrator.workflow.errors import (
    InvalidWorkflowError,
    UnknownWorkflow,
    WorkflowConfigurationError,
)
from medical_mirror_orchestrator.orchestrator.workflow.models import Step
from medical_mirror_orchestrator.server.models import ExecuteRequest, StepRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _orchestrator(request: Request) -> Orchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if not isinstance(orchestrator, Orchestrator):
        # Only reachable if the app was used outside its lifespan.
        raise HTTPException(status_code=503, detail="Orchestrator not started")
    return orchestrator


def _utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _validation_message(errors: Sequence[Mapping[str, Any]]) -> str:
    parts = []
    for err in errors:
        loc = tuple(err["loc"])
        if loc[:1] == ("body",):
            loc = loc[1:]
        parts.append(f"{'.'.join(str(p) for p in loc) or 'body'}: {err['msg']}")
    return "; ".join(parts)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 `{error}` like every other rejection."""
    message = f"Invalid request: {_validation_message(exc.errors())}"
    logger.info("Rejected request", extra={"path": request.url.path, "error": message})
    return JSONResponse(status_code=400, content={"detail": {"error": message}})


@router.get("")
def info() -> dict[str, object]:
    return {
        "name": "Medical Mirror Orchestrator",
        "version": __version__,
        "description": "Multi-agent workflow orchestration",
        "availableWorkflows": [entry.to_json() for entry in list_workflows()],
        "endpoints": {
            "health": "GET /api/orchestrator/health",
            "execute": "POST /api/orchestrator/execute",
            "step": "POST /api/orchestrator/step",
            "workflows": "GET /api/orchestrator/workflows",
        },
    }


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    services = await _orchestrator(request).services_health()
    return {
        "status": overall_status(services),
        "services": {name: status.value for name, status in services.items()},
        "timestamp": _utc_now_iso(),
    }


@router.get("/workflows")
def workflows() -> dict[str, object]:
    return {
        "workflows": [
            {
                "id": entry.workflow_id,
                "name": entry.workflow.name,
                "steps": [step.name for step in entry.workflow.steps],
            }
            for entry in list_workflows()
        ]
    }


@router.post("/execute")
async def execute(request: Request, body: ExecuteRequest) -> dict[str, object]:
    orchestrator = _orchestrator(request)

    try:
        workflow = orchestrator.resolve_workflow(
            workflow_id=body.workflow_id,
            workflow=body.workflow,
            context=body.context or {},
        )
        logger.info("Executing workflow", extra={"workflow": workflow.name})
        result = await orchestrator.run(workflow)
    except UnknownWorkflow as e:
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "availableWorkflows": list(WORKFLOW_CATALOG)},
        ) from e
    except ValidationError as e:
        message = f"Invalid workflow: {_validation_message(e.errors())}"
        raise HTTPException(status_code=400, detail={"error": message}) from e
    except (InvalidWorkflowError, WorkflowConfigurationError) as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from e
    except Exception as e:
        logger.exception("Workflow execution failed")
        raise HTTPException(status_code=500, detail={"error": str(e)}) from e

    return {
        "workflow": workflow.name,
        **result.to_json(),
        "timestamp": _utc_now_iso(),
    }


@router.post("/step")
async def execute_step(request: Request, body: StepRequest) -> dict[str, object]:
    orchestrator = _orchestrator(request)
    if not body.type:
        raise HTTPException(status_code=400, detail={"error": "type is required"})

    try:
        step = Step(
            name=body.name or (f"{body.type}:{body.action}" if body.action else body.type),
            type=body.type,
            action=body.action,
            params=body.params,
            optional=body.optional,
        )
        result = await orchestrator.run_step(step, body.context or {})
    except ValidationError as e:
        message = f"Invalid step: {_validation_message(e.errors())}"
        raise HTTPException(status_code=400, detail={"error": message}) from e
    except WorkflowConfigurationError as e:
        raise HTTPException(status_code=400, detail={"error": str(e)}) from e
    except Exception as e:
        logger.exception("Step execution failed")
        raise HTTPException(status_code=500, detail={"error": str(e)}) from e

    return {
        "success": result.success,
        "result": result.results[0].to_json(),
        "timestamp": _utc_now_iso(),
    }
