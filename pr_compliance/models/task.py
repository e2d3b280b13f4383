"""Validation task data models."""

from pydantic import BaseModel, ConfigDict, Field


# Wire names of the inputs every task must carry, in message order
REQUIRED_INPUTS = ("baseRef", "headRef", "owner", "repo", "githubToken")


class TaskInputs(BaseModel):
    """Inputs of a validation task, as sent by the parent process."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base_ref: str = Field(alias="baseRef")
    head_ref: str = Field(alias="headRef")
    owner: str
    repo: str
    auth_token: str = Field(alias="githubToken", repr=False)

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"
