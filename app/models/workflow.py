"""Step list model for a CI workflow definition."""
from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_STEP_NAME = "Unnamed step"
DEFAULT_DISPLAY_NAME = "workflow"


def normalize_newlines(value: str) -> str:
    return (value or "").replace("\r\n", "\n").replace("\r", "\n")


def single_line(value: str) -> str:
    """Collapse any line breaks in a label into single spaces."""
    return " ".join(part.strip() for part in (value or "").splitlines() if part.strip())


@dataclass
class Step:
    name: str = DEFAULT_STEP_NAME
    uses: str = ""
    run: str = ""

    def __post_init__(self) -> None:
        self.name = single_line(self.name) or DEFAULT_STEP_NAME
        self.uses = normalize_newlines(self.uses).strip()
        self.run = normalize_newlines(self.run).strip()

    @property
    def summary(self) -> str:
        return self.uses or self.run or "(empty step)"

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "uses": self.uses, "run": self.run}


@dataclass
class WorkflowDocument:
    """Display name plus steps in execution order."""

    display_name: str = DEFAULT_DISPLAY_NAME
    steps: list[Step] = field(default_factory=list)
