"""Configuration for the workflow orchestrator.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Collaborator URLs keep the variable names the rest of the Medical Mirror stack
already uses (`OBSERVER_URL`, `CLAUDE_TEAM_HUB`, ...), so one `.env` can be
shared between the services.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrchestratorSettings(BaseSettings):
    """Settings for the orchestrator and its collaborators.

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `OrchestratorSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        validation_alias="LOG_FORMAT",
        description="Log output format: structured JSON lines or plain text",
    )

    observer_url: str = Field(
        default="http://localhost:3000",
        validation_alias="OBSERVER_URL",
        description="Base URL of the Observer telemetry server",
    )
    claude_team_hub_url: str = Field(
        default="ws://localhost:4847",
        validation_alias="CLAUDE_TEAM_HUB",
        description="WebSocket URL of the Claude Team coordination hub",
    )
    claude_team_http_url: str = Field(
        default="http://localhost:4847",
        validation_alias="CLAUDE_TEAM_HTTP",
        description="HTTP URL of the Claude Team hub (status, webhook, health)",
    )
    scc_sentinel_url: str = Field(
        default="http://localhost:3002",
        validation_alias="SCC_SENTINEL_URL",
        description="Base URL of the SCC sentinel service",
    )
    scc_app_url: str = Field(
        default="http://localhost:3001",
        validation_alias="SCC_APP_URL",
        description="Base URL of the SCC application",
    )

    hub_enabled: bool = Field(
        default=True,
        validation_alias="CLAUDE_TEAM_ENABLED",
        description="Open the persistent hub connection on startup",
    )
    hub_window_name: str = Field(
        default="medical-mirror-observer",
        validation_alias="CLAUDE_TEAM_WINDOW_NAME",
        description="Window name this process registers with on the hub",
    )
    hub_reconnect_seconds: float = Field(
        default=5.0,
        ge=0,
        validation_alias="CLAUDE_TEAM_RECONNECT_SECONDS",
        description="Delay before reconnecting to the hub (0 disables reconnects)",
    )

    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="ORCHESTRATOR_REQUEST_TIMEOUT_SECONDS",
        description="Per-request timeout of the shared HTTP client",
    )
    step_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        validation_alias="ORCHESTRATOR_STEP_TIMEOUT_SECONDS",
        description="Deadline for a single dispatcher call; overruns fail the step",
    )
    health_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        validation_alias="ORCHESTRATOR_HEALTH_TIMEOUT_SECONDS",
        description="Timeout for each liveness probe",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _strip_trailing_slashes(self) -> OrchestratorSettings:
        # Endpoint paths are appended with a leading slash.
        self.observer_url = self.observer_url.rstrip("/")
        self.claude_team_hub_url = self.claude_team_hub_url.rstrip("/")
        self.claude_team_http_url = self.claude_team_http_url.rstrip("/")
        self.scc_sentinel_url = self.scc_sentinel_url.rstrip("/")
        self.scc_app_url = self.scc_app_url.rstrip("/")
        return self

    @property
    def health_endpoints(self) -> dict[str, str]:
        """Liveness URLs of the HTTP collaborators, keyed by reported service name."""

        return {
            "observer": f"{self.observer_url}/health",
            "claudeTeam": f"{self.claude_team_http_url}/health",
            "sccSentinel": f"{self.scc_sentinel_url}/health",
        }
