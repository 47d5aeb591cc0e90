"""Request bodies accepted by the HTTP API"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class HistoryEntry(BaseModel):
    """One prior conversation turn as sent by the client"""

    role: str
    content: Any = ""


class ChatBody(BaseModel):
    """POST /api/chat"""

    message: str = ""
    systemPrompt: Optional[str] = None
    context: Optional[str] = None
    conversationHistory: Optional[List[HistoryEntry]] = None
    images: Optional[List[Union[str, Dict[str, Any]]]] = None
    promptOverride: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
