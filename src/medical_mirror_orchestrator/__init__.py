"""Medical Mirror Orchestrator.

Multi-step workflow orchestration across the Medical Mirror collaborators:
- the Observer telemetry store (events, AI analysis, references)
- the browser bridge (Chrome extension control, via the team hub)
- the Claude Team coordination hub
- the SCC clinical apps
"""

__version__ = "1.0.0"

from medical_mirror_orchestrator.orchestrator.config import OrchestratorSettings

__all__ = ["__version__", "OrchestratorSettings"]
