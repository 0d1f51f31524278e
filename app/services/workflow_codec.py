from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from app.models.workflow import DEFAULT_DISPLAY_NAME, Step, WorkflowDocument, single_line

ACTION_STEP_NAME = "Action step"
RUN_STEP_NAME = "Run command"
PLACEHOLDER_STEP = Step(name="Hello", run='echo "Hello from Workflow Studio"')

WORKFLOW_HEADER = (
    "name: {display_name}",
    "on:",
    "  push:",
    "    branches: [main]",
    "  pull_request:",
    "jobs:",
    "  build:",
    "    runs-on: ubuntu-latest",
    "    steps:",
)
STEP_INDENT = " " * 6
FIELD_INDENT = " " * 8
BLOCK_INDICATORS = frozenset({"|", "|-", "|+", ">", ">-", ">+"})


class TokenKind(str, Enum):
    STEP_NAME = "step_name"
    STEP_USES = "step_uses"
    STEP_RUN = "step_run"
    FIELD_USES = "field_uses"
    FIELD_RUN = "field_run"
    DOC_NAME = "doc_name"
    BLANK = "blank"
    OTHER = "other"


# Checked in order; the first matching marker wins.
STEP_MARKERS: tuple[tuple[TokenKind, str], ...] = (
    (TokenKind.STEP_NAME, "- name:"),
    (TokenKind.STEP_USES, "- uses:"),
    (TokenKind.STEP_RUN, "- run:"),
    (TokenKind.FIELD_USES, "uses:"),
    (TokenKind.FIELD_RUN, "run:"),
)

FIELD_FOR_KIND = {
    TokenKind.STEP_USES: "uses",
    TokenKind.STEP_RUN: "run",
    TokenKind.FIELD_USES: "uses",
    TokenKind.FIELD_RUN: "run",
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str = ""
    indent: int = 0
    line_no: int = 0
    raw: str = ""

    @property
    def key_column(self) -> int:
        """Column of the mapping key, past any sequence dash."""
        if self.kind in (TokenKind.STEP_NAME, TokenKind.STEP_USES, TokenKind.STEP_RUN):
            return self.indent + 2
        return self.indent


def classify_line(raw: str, line_no: int = 0) -> Token:
    stripped = raw.strip()
    indent = len(raw) - len(raw.lstrip())
    if not stripped:
        return Token(TokenKind.BLANK, indent=indent, line_no=line_no, raw=raw)
    for kind, marker in STEP_MARKERS:
        if stripped.startswith(marker):
            value = stripped[len(marker):].strip()
            return Token(kind, value=value, indent=indent, line_no=line_no, raw=raw)
    if indent == 0 and stripped.startswith("name:"):
        value = stripped[len("name:"):].strip()
        return Token(TokenKind.DOC_NAME, value=value, indent=indent, line_no=line_no, raw=raw)
    return Token(TokenKind.OTHER, value=stripped, indent=indent, line_no=line_no, raw=raw)


def tokenize(text: str) -> list[Token]:
    """
    Split workflow text into classified line tokens.

    Only LF ends a line and a trailing CR from CRLF input is dropped. Other
    Unicode line separators stay inside the line they appear in.
    """
    lines = (text or "").split("\n")
    if lines[-1] == "":
        lines.pop()
    tokens = []
    for line_no, raw in enumerate(lines, start=1):
        if raw.endswith("\r"):
            raw = raw[:-1]
        tokens.append(classify_line(raw, line_no))
    return tokens


@dataclass
class _Block:
    field_name: str
    indicator: str
    key_column: int
    lines: list[str] = field(default_factory=list)

    def accepts(self, token: Token) -> bool:
        return token.kind == TokenKind.BLANK or token.indent > self.key_column

    def render(self) -> str:
        lines = list(self.lines)
        while lines and not lines[-1].strip():
            lines.pop()
        content = [line for line in lines if line.strip()]
        if not content:
            return ""
        margin = min(len(line) - len(line.lstrip()) for line in content)
        dedented = [line[margin:] for line in lines]
        if self.indicator.startswith(">"):
            dedented = [line if line.strip() else "" for line in dedented]
            paragraphs = "\n".join(dedented).split("\n\n")
            return "\n".join(" ".join(part.split("\n")) for part in paragraphs)
        return "\n".join(dedented)


class _StepParser:
    """Consumes tokens and accumulates steps in source order."""

    def __init__(self) -> None:
        self.steps: list[Step] = []
        self.display_name: Optional[str] = None
        self._open: Optional[dict[str, str]] = None
        self._block: Optional[_Block] = None

    def feed(self, token: Token) -> None:
        if self._block is not None:
            if self._block.accepts(token):
                self._block.lines.append(token.raw)
                return
            self._close_block()

        if token.kind == TokenKind.STEP_NAME:
            self._start({"name": token.value})
        elif token.kind == TokenKind.STEP_USES:
            self._start({"name": ACTION_STEP_NAME})
            self._set_field(token)
        elif token.kind == TokenKind.STEP_RUN:
            self._start({"name": RUN_STEP_NAME})
            self._set_field(token)
        elif token.kind in (TokenKind.FIELD_USES, TokenKind.FIELD_RUN):
            if self._open is not None:
                self._set_field(token)
        elif token.kind == TokenKind.DOC_NAME:
            if self.display_name is None and token.value:
                self.display_name = token.value

    def finish(self) -> WorkflowDocument:
        self._close_block()
        self._flush()
        return WorkflowDocument(display_name=self.display_name or DEFAULT_DISPLAY_NAME, steps=self.steps)

    def _start(self, fields: dict[str, str]) -> None:
        self._flush()
        self._open = fields

    def _set_field(self, token: Token) -> None:
        field_name = FIELD_FOR_KIND[token.kind]
        if token.value in BLOCK_INDICATORS:
            self._open[field_name] = ""
            self._block = _Block(field_name, token.value, token.key_column)
        else:
            self._open[field_name] = token.value

    def _close_block(self) -> None:
        if self._block is None:
            return
        if self._open is not None:
            self._open[self._block.field_name] = self._block.render()
        self._block = None

    def _flush(self) -> None:
        if self._open is not None:
            self.steps.append(Step(**self._open))
        self._open = None


def parse(text: str) -> WorkflowDocument:
    """
    Recover the step list from workflow text.

    Never raises. Unrecognized lines are skipped, so malformed input yields
    an empty step list rather than an error.
    """
    parser = _StepParser()
    for token in tokenize(text):
        parser.feed(token)
    return parser.finish()


def serialize(document: WorkflowDocument) -> str:
    """Render a document as workflow text; an empty step list gets a placeholder step."""
    display_name = single_line(document.display_name) or DEFAULT_DISPLAY_NAME
    lines = [line.format(display_name=display_name) for line in WORKFLOW_HEADER]
    for step in document.steps or [PLACEHOLDER_STEP]:
        lines.append(f"{STEP_INDENT}- name: {step.name}")
        if step.uses:
            lines.extend(_field_lines("uses", step.uses))
        if step.run:
            lines.extend(_field_lines("run", step.run))
    return "\n".join(lines) + "\n"


def _field_lines(key: str, value: str) -> list[str]:
    if "\n" not in value:
        return [f"{FIELD_INDENT}{key}: {value}"]
    body = [f"{FIELD_INDENT}  {line}" if line else "" for line in value.split("\n")]
    return [f"{FIELD_INDENT}{key}: |", *body]


def display_name_from_path(path: str) -> str:
    name = PurePosixPath(path or "").name
    return re.sub(r"\.ya?ml$", "", name, flags=re.IGNORECASE) or DEFAULT_DISPLAY_NAME
