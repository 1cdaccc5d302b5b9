"""Engine configuration."""

from typing import List

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Configuration for the action item engine and its service surface."""

    default_icon: str = "📋"
    terminal_lead_phases: List[str] = ["won", "lost"]
    default_limit: int = Field(default=25, ge=1)
    max_limit: int = Field(default=50, ge=1)
    log_rule_errors: bool = True
