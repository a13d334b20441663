"""Application configuration using Pydantic settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application settings, overridable through ``AGENT_CANVAS_*`` variables."""

    model_config = SettingsConfigDict(env_prefix="AGENT_CANVAS_", env_file=Path(".env"), extra="ignore")

    validate_connections: bool = Field(default=True, description="Apply the connection rules when edges are created.")
    output_filename: str = Field(default="openai_agent_workflow.py", description="File written by `generate --save`.")
    verbose: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Return settings as a dictionary."""

        return self.model_dump()


__all__ = ["Settings"]
