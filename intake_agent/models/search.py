from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from intake_agent.models.session import EntityType, SessionContext, Turn


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    query: Optional[str] = None
    conversation_history: List[Turn] = Field(default_factory=list, alias="conversationHistory")
    context: Optional[SessionContext] = None


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    entity_type: EntityType = Field(alias="entityType")
    collected_details: Dict[str, Any] = Field(default_factory=dict, alias="collectedDetails")
    ready_to_handoff: bool = Field(default=False, alias="readyToHandoff")
    context: SessionContext
