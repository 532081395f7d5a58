"""Orchestrator components.

- Settings loaded from .env
- Structured logging
- Workflow interpreter (interpolation, conditions, step execution, engine)
- Collaborator dispatchers, the team hub client and health probing
- A small CLI surface
"""
