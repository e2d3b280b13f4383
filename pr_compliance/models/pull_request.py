"""Pull request data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PRState(str, Enum):
    """State of a pull request on the hosting service."""

    OPEN = "open"
    CLOSED = "closed"


class PullRequest(BaseModel):
    """Pull request associated with a commit."""

    model_config = ConfigDict(extra="ignore")

    number: int
    title: Optional[str] = None
    body: Optional[str] = None
    state: PRState
    merged: Optional[bool] = None  # absent or null counts as not merged
