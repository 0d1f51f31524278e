"""
Domain models for Workflow Studio.
"""
from __future__ import annotations

from app.models.publish import BranchRef, PublishRequest, PublishResult, RemoteFile
from app.models.workflow import DEFAULT_DISPLAY_NAME, DEFAULT_STEP_NAME, Step, WorkflowDocument

__all__ = [
    "BranchRef",
    "DEFAULT_DISPLAY_NAME",
    "DEFAULT_STEP_NAME",
    "PublishRequest",
    "PublishResult",
    "RemoteFile",
    "Step",
    "WorkflowDocument",
]
