"""Validation result and outbound message data models."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationRecord(BaseModel):
    """Compliance outcome for one commit."""

    model_config = ConfigDict(populate_by_name=True)

    commit: str
    pr_number: Optional[int] = Field(default=None, alias="prNumber")
    compliance: bool


class ResultMessage(BaseModel):
    """Outbound success message carrying the ordered validation records."""

    action: Literal["result"] = "result"
    data: List[ValidationRecord] = []


class ErrorMessage(BaseModel):
    """Outbound failure message."""

    action: Literal["error"] = "error"
    error: str
