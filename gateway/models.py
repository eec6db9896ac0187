"""Gateway request/response models."""
from pydantic import BaseModel
from typing import Literal


class AggregateRequest(BaseModel):
    """Aggregation request carrying an SPL query, forwarded verbatim."""
    query: str


class AggregateResponse(BaseModel):
    """Successful aggregation."""
    status: Literal["success"] = "success"
    file: str


class ErrorResponse(BaseModel):
    """Failed aggregation; message is the failure's text."""
    status: Literal["error"] = "error"
    message: str
