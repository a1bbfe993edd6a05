from typing import Optional

from pydantic import BaseModel


class AIResponse(BaseModel):
    content: str
    model: Optional[str] = None
    tokens_used: Optional[int] = None
    finish_reason: Optional[str] = None
