"""Configuration for the REST server.

Collaborator settings live in
:class:`medical_mirror_orchestrator.orchestrator.config.OrchestratorSettings`;
this only covers how the API itself is hosted.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Chrome extensions, localhost, Tailscale (100.x) and private LAN ranges.
DEFAULT_CORS_ORIGIN_REGEX = (
    r"^(chrome-extension://.*"
    r"|http://localhost(:\d+)?"
    r"|http://127\.0\.0\.1(:\d+)?"
    r"|http://100\.\d+\.\d+\.\d+(:\d+)?"
    r"|http://192\.168\.\d+\.\d+(:\d+)?"
    r"|http://10\.\d+\.\d+\.\d+(:\d+)?)$"
)


class ServerSettings(BaseSettings):
    host: str = Field(default="0.0.0.0", validation_alias="ORCHESTRATOR_HOST")
    port: int = Field(default=3000, ge=1, le=65535, validation_alias="ORCHESTRATOR_PORT")

    cors_origin_regex: str = Field(
        default=DEFAULT_CORS_ORIGIN_REGEX,
        validation_alias="ORCHESTRATOR_CORS_ORIGIN_REGEX",
        description="Regex of allowed CORS origins (the extension and local network callers).",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")
