"""Shared plumbing for collaborator dispatchers.

Every dispatcher performs exactly one request per call and returns the parsed
JSON body. Anything that is not a clean 2xx JSON answer is raised as
`RemoteCallError` so the engine can record it as a step failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from medical_mirror_orchestrator.orchestrator.workflow.errors import RemoteCallError, StepError

logger = logging.getLogger(__name__)

ParamsT = TypeVar("ParamsT", bound=BaseModel)


class ServiceDispatcher(Protocol):
    """Translate an abstract `(action, params)` pair into one collaborator call."""

    service: str

    def supports(self, action: str | None) -> bool: ...

    async def dispatch(self, action: str | None, params: dict[str, Any]) -> Any: ...


async def request_json(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    service: str,
    json: Any = None,
    params: Mapping[str, str] | None = None,
) -> Any:
    logger.debug("Calling collaborator", extra={"service": service, "method": method, "url": url})
    try:
        response = await http.request(method, url, json=json, params=params)
    except httpx.TimeoutException as e:
        raise RemoteCallError(service, f"{service}: {method} {url} timed out") from e
    except httpx.HTTPError as e:
        raise RemoteCallError(service, f"{service}: {method} {url} failed: {e}") from e

    if response.is_error:
        raise RemoteCallError(
            service,
            f"{service}: {method} {url} returned HTTP {response.status_code}",
            status_code=response.status_code,
        )

    try:
        body = response.json()
    except ValueError as e:
        raise RemoteCallError(
            service,
            f"{service}: {method} {url} returned a non-JSON body",
            status_code=response.status_code,
        ) from e

    if isinstance(body, dict) and body.get("error"):
        raise RemoteCallError(
            service, f"{service} error: {body['error']}", status_code=response.status_code
        )
    return body


def parse_params(model: type[ParamsT], params: Mapping[str, Any], *, where: str) -> ParamsT:
    """Validate resolved step params against a typed shape."""

    try:
        return model.model_validate(dict(params))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'params'}: {err['msg']}"
            for err in e.errors()
        )
        raise StepError(f"Invalid parameters for {where}: {problems}") from e
