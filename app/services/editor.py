"""
Editor state for the visual workflow canvas.

`EditorState` is immutable. Every update function takes a state and returns
a new one, and `render_canvas` projects a state into display nodes.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from app.config import settings
from app.models.workflow import Step, WorkflowDocument
from app.services.workflow_codec import display_name_from_path, parse, serialize

IMPORTED_WORKFLOW_PATH = ".github/workflows/imported.yml"

COMMON_COMPONENTS: tuple[Step, ...] = (
    Step(name="Checkout", uses="actions/checkout@v4"),
    Step(name="Setup Node.js", uses="actions/setup-node@v4"),
    Step(name="Install Dependencies", run="npm ci"),
    Step(name="Run Tests", run="npm test"),
    Step(name="Build", run="npm run build"),
    Step(name="Upload Artifact", uses="actions/upload-artifact@v4"),
)


@dataclass(frozen=True)
class EditorWorkflow:
    name: str
    path: str
    content: str = ""


@dataclass(frozen=True)
class EditorState:
    workflows: tuple[EditorWorkflow, ...] = ()
    active_index: int = -1
    steps: tuple[Step, ...] = ()
    selected_index: int = -1
    target_path: str = ""
    text: str = ""
    status: str = ""
    status_is_error: bool = False

    @property
    def active_workflow(self) -> Optional[EditorWorkflow]:
        if 0 <= self.active_index < len(self.workflows):
            return self.workflows[self.active_index]
        return None


@dataclass(frozen=True)
class CanvasNode:
    index: int
    title: str
    summary: str
    active: bool


def _with_status(state: EditorState, message: str, is_error: bool = False) -> EditorState:
    return replace(state, status=message, status_is_error=is_error)


def select_workflow(state: EditorState, index: int) -> EditorState:
    if not 0 <= index < len(state.workflows):
        return state
    workflow = state.workflows[index]
    return replace(
        state,
        active_index=index,
        steps=tuple(parse(workflow.content).steps),
        selected_index=-1,
        target_path=workflow.path,
        text=workflow.content,
    )


def load_workflows(state: EditorState, files: list[EditorWorkflow]) -> EditorState:
    if not files:
        fresh = EditorState(target_path=settings.default_workflow_path)
        return _with_status(fresh, "No workflows found. You can start from scratch.")
    loaded = select_workflow(replace(state, workflows=tuple(files)), 0)
    return _with_status(loaded, f"Loaded {len(files)} workflow file(s)")


def start_from_scratch(state: EditorState) -> EditorState:
    path = settings.default_workflow_path
    workflow = EditorWorkflow(name=path.rsplit("/", 1)[-1], path=path)
    fresh = select_workflow(replace(state, workflows=(workflow,)), 0)
    fresh = replace(fresh, text=generate_text(fresh))
    return _with_status(fresh, "Started a new workflow from scratch")


def import_text(state: EditorState, text: str, source: str = "YAML input") -> EditorState:
    steps = parse(text).steps
    if not steps:
        return _with_status(state, f"No steps found in {source}", is_error=True)

    if state.active_workflow is None:
        imported = EditorWorkflow(name="imported.yml", path=IMPORTED_WORKFLOW_PATH, content=text)
        state = replace(state, workflows=(imported,), active_index=0)

    updated = replace(
        state,
        steps=tuple(steps),
        selected_index=-1,
        text=text,
        target_path=state.target_path or IMPORTED_WORKFLOW_PATH,
    )
    return _with_status(updated, f"Parsed {len(steps)} step(s) from {source}")


def add_step(state: EditorState, step: Step) -> EditorState:
    return _with_status(replace(state, steps=state.steps + (step,)), f"Added {step.name} to canvas")


def select_step(state: EditorState, index: int) -> EditorState:
    if not 0 <= index < len(state.steps):
        return replace(state, selected_index=-1)
    return replace(state, selected_index=index)


def update_step(state: EditorState, index: int, name: str = "", uses: str = "", run: str = "") -> EditorState:
    if not 0 <= index < len(state.steps):
        return state
    steps = list(state.steps)
    steps[index] = Step(name=name, uses=uses, run=run)
    return _with_status(replace(state, steps=tuple(steps)), "Node updated")


def delete_step(state: EditorState, index: int) -> EditorState:
    if not 0 <= index < len(state.steps):
        return state
    steps = state.steps[:index] + state.steps[index + 1:]
    return _with_status(replace(state, steps=steps, selected_index=-1), "Node deleted")


def move_step(state: EditorState, source: int, target: int) -> EditorState:
    """Reorder a step, as when it is dragged to a new position on the canvas."""
    count = len(state.steps)
    if not (0 <= source < count and 0 <= target < count) or source == target:
        return state
    steps = list(state.steps)
    steps.insert(target, steps.pop(source))
    return replace(state, steps=tuple(steps), selected_index=target)


def generate_text(state: EditorState) -> str:
    workflow = state.active_workflow
    display_name = display_name_from_path(workflow.name if workflow else "workflow.yml")
    return serialize(WorkflowDocument(display_name=display_name, steps=list(state.steps)))


def render_canvas(state: EditorState) -> list[CanvasNode]:
    return [
        CanvasNode(
            index=position + 1,
            title=step.name,
            summary=step.summary,
            active=position == state.selected_index,
        )
        for position, step in enumerate(state.steps)
    ]
