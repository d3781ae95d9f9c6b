"""
Best-effort extraction of a structured summary from a free-text model reply.

A reply either carries the flow's terminal label (e.g. ``Goal Description:``)
or it does not. Without it the result is a ``PartialSummary``; with it every
known field is captured from the text between its label and the next blank
line / next known label. Fields that cannot be captured fall back to ``""``
or ``[]`` and are listed in ``CompleteSummary.missing_fields``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from re import Pattern
from typing import List, Tuple, Type, Union

from pydantic import BaseModel

from gohive.schemas.mentor import EventData, GoalData

_NUMBERED = re.compile(r"\d+\.")
_ITEM_PREFIX = re.compile(r"^\s*(?:\d+\.|[-*•])\s*")


@dataclass(frozen=True)
class SummaryField:
    name: str
    # Regex fragment matching the label text without its colon.
    label: str
    is_list: bool = False


@dataclass(frozen=True)
class SummaryFormat:
    # Regex fragment of the label whose presence marks a finished summary.
    terminal_label: str
    fields: Tuple[SummaryField, ...]
    model: Type[BaseModel]
    terminal: Pattern[str] = field(init=False, repr=False, compare=False)
    _patterns: Tuple[Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        labels = "|".join(f.label for f in self.fields)
        object.__setattr__(
            self,
            "terminal",
            re.compile(_label_head(self.terminal_label), re.IGNORECASE),
        )
        object.__setattr__(
            self,
            "_patterns",
            tuple(_field_pattern(f.label, labels) for f in self.fields),
        )

    def captures(self, text: str):
        for summary_field, pattern in zip(self.fields, self._patterns):
            match = pattern.search(text)
            yield summary_field, (match.group("value") if match else None)


def _label_head(label: str) -> str:
    # Label forms: "**Label:**", "**Label**:", "Label:" and "Label:**".
    return rf"(?:\*\*(?:{label})(?::\*\*|\*\*:)|\b(?:{label}):(?:\*\*)?)"


def _field_pattern(label: str, all_labels: str) -> Pattern[str]:
    # A field ends at a blank line or at a line opening with another label,
    # possibly behind a list marker such as "2." or "-".
    stop = (
        r"(?=\n[ \t]*\n"
        rf"|\n[ \t]*(?:(?:\d+\.|[-*•])[ \t]*)?(?:\*\*)?(?:{all_labels})(?:\*\*)?:"
        r"|\Z)"
    )
    return re.compile(
        rf"{_label_head(label)}[ \t]*(?:\n[ \t]*)?(?P<value>[\s\S]*?){stop}",
        re.IGNORECASE,
    )


GOAL_FORMAT = SummaryFormat(
    terminal_label=r"Goal Description",
    fields=(
        SummaryField("description", r"Goal Description"),
        SummaryField("pointA", r"Point A[^:\n]*"),
        SummaryField("pointB", r"Point B[^:\n]*"),
        SummaryField("steps", r"Steps[^:\n]*", is_list=True),
        SummaryField("tips", r"Tips[^:\n]*", is_list=True),
    ),
    model=GoalData,
)

EVENT_FORMAT = SummaryFormat(
    terminal_label=r"Description",
    fields=(
        SummaryField("description", r"Description"),
        SummaryField("date_time", r"Date and Time[^:\n]*"),
    ),
    model=EventData,
)


@dataclass(frozen=True)
class PartialSummary:
    """The reply does not contain a summary yet."""

    text: str


@dataclass(frozen=True)
class CompleteSummary:
    data: BaseModel
    missing_fields: List[str] = field(default_factory=list)


SummaryResult = Union[PartialSummary, CompleteSummary]


def parse_list(text: str | None) -> List[str]:
    """
    Split a captured block into items: numbered or multi-line blocks are
    split per line, otherwise on ``;``, otherwise the block is one item.
    """
    text = (text or "").strip()
    if not text:
        return []
    if _NUMBERED.search(text) or "\n" in text:
        items = (_ITEM_PREFIX.sub("", line).strip() for line in text.splitlines())
        return [item for item in items if item]
    if ";" in text:
        return [item.strip() for item in text.split(";") if item.strip()]
    return [text]


def _clean_scalar(text: str | None) -> str:
    return (text or "").strip().strip("\"'`").strip()


def parse_summary(reply: str, fmt: SummaryFormat) -> SummaryResult:
    if not fmt.terminal.search(reply or ""):
        return PartialSummary(text=reply or "")

    values = {}
    missing: List[str] = []
    for summary_field, raw in fmt.captures(reply):
        if summary_field.is_list:
            value = parse_list(raw)
        else:
            value = _clean_scalar(raw)
        if not value:
            missing.append(summary_field.name)
        values[summary_field.name] = value

    return CompleteSummary(data=fmt.model(**values), missing_fields=missing)


__all__ = [
    "CompleteSummary",
    "EVENT_FORMAT",
    "GOAL_FORMAT",
    "PartialSummary",
    "SummaryField",
    "SummaryFormat",
    "SummaryResult",
    "parse_list",
    "parse_summary",
]
