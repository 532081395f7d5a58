"""FastAPI server adapter for medical-mirror-orchestrator.

This module exposes a REST API over the orchestrator services.

Design intent:
- Keep workflow logic in `medical_mirror_orchestrator.orchestrator.*`
- Keep server-specific concerns (routing, CORS, lifespan) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from medical_mirror_orchestrator.server.app import create_app
