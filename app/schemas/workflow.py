from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON bodies use camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StepSchema(CamelModel):
    name: str = "Unnamed step"
    uses: str = ""
    run: str = ""


class LoadWorkflowsRequest(CamelModel):
    repo_url: str = Field(min_length=1)
    token: Optional[str] = None


class WorkflowFileSchema(CamelModel):
    name: str
    path: str
    content_hash: Optional[str] = None
    content: str
    steps: list[StepSchema] = Field(default_factory=list)


class LoadWorkflowsResponse(CamelModel):
    owner: str
    repo: str
    has_actions: bool
    workflows: list[WorkflowFileSchema] = Field(default_factory=list)


class ParseWorkflowRequest(CamelModel):
    content: str


class WorkflowDocumentSchema(CamelModel):
    display_name: str
    steps: list[StepSchema]


class GenerateWorkflowRequest(CamelModel):
    display_name: str = "workflow"
    steps: list[StepSchema] = Field(default_factory=list)


class GenerateWorkflowResponse(CamelModel):
    content: str


class ComponentsResponse(CamelModel):
    components: list[StepSchema]
