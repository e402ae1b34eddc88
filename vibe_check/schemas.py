"""Pydantic models and enums for the Vibe Check analysis API."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SKILL_LEVEL = "beginner"


class Stage(str, Enum):
    """Enumerate the analysis stages in execution order."""

    MARKET = "market"
    TECHNICAL = "technical"
    OPPORTUNITY = "opportunity"
    DEPLOYMENT = "deployment"
    SENTIMENT = "sentiment"

    @property
    def status_message(self) -> str:
        """Return the human-readable progress phrase shown before the stage runs."""
        messages = {
            Stage.MARKET: "Researching existing solutions across the web...",
            Stage.TECHNICAL: "Analyzing technical requirements and stack...",
            Stage.OPPORTUNITY: "Evaluating market size and opportunity...",
            Stage.DEPLOYMENT: "Identifying optimal deployment strategy...",
            Stage.SENTIMENT: "Gathering community sentiment about competitors...",
        }
        return messages[self]


class AnalyzeRequest(BaseModel):
    """Payload for starting a streamed analysis."""

    model_config = ConfigDict(populate_by_name=True)

    idea: Optional[str] = Field(
        default=None,
        description="Free-text product idea to analyze.",
    )
    skill_level: Optional[str] = Field(
        default=None,
        alias="skillLevel",
        description="Requester's experience, used to tune the technical stage.",
    )


class AnalysisRecord(BaseModel):
    """Aggregate of every stage result, stored under a shareable identifier.

    Attributes use snake_case (the storage row shape); the public JSON shape
    uses the camelCase aliases.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    idea: str
    skill_level: str = Field(alias="skillLevel")
    market: Dict[str, Any]
    technical: Dict[str, Any]
    opportunity: Dict[str, Any]
    deployment: Dict[str, Any]
    sentiment: Dict[str, Any]
    created_at: str = Field(alias="createdAt")

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class HealthResponse(BaseModel):
    status: str
    version: str
