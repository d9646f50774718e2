from pydantic import BaseModel
from typing import List, Optional


class ChatRequest(BaseModel):
    """
    Chat request schema:
    - prompt: Optional[str] = None # missing prompt is answered with 400, not 422
    """
    prompt: Optional[str] = None


class ChatResponse(BaseModel):
    reply: str
    model_used: str
    attempted_models: List[str] = []


class ExhaustedResponse(BaseModel):
    error: str
    attempted_models: List[str]
    last_error: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


class ModelsResponse(BaseModel):
    free_models: List[str]
    count: int
    cached: bool
