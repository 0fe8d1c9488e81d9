from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class _Label(str, Enum):
    def __str__(self) -> str:
        return str(self.value)


class OfficeApplication(_Label):
    EXCEL = "Excel"
    WORD = "Word"
    ACCESS = "Access"
    POWERPOINT = "PowerPoint"
    OUTLOOK = "Outlook"
    PROJECT = "Project"
    PUBLISHER = "Publisher"


class VBACategory(_Label):
    WORKBOOK = "Workbook"
    WORKSHEET = "Worksheet"
    RANGE = "Range"
    CHART = "Chart"
    PIVOT_TABLE = "PivotTable"
    DOCUMENT = "Document"
    TABLE = "Table"
    FORM = "Form"
    QUERY = "Query"
    SLIDE = "Slide"
    SHAPE = "Shape"
    EMAIL = "Email"
    CALENDAR = "Calendar"


class Difficulty(_Label):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


def label(value: Any) -> str:
    """Plain text for an enum member or a raw payload string."""
    return str(getattr(value, "value", value))


def _coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    # Unknown values are kept verbatim; str enums still compare equal to
    # the raw payload strings.
    if value is None:
        return ""
    try:
        return enum_cls(value)
    except ValueError:
        return str(value)


def coerce_number(value: Any, default: float) -> float:
    """Numeric payload field, or ``default`` when missing or not a number."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp from an upstream payload.

    Accepts a trailing ``Z``. Returns None for missing or unparseable values.
    """

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class CodeExample:
    id: str
    title: str
    description: str
    code: str
    category: VBACategory | str
    difficulty: Difficulty | str
    tags: frozenset[str] = field(default_factory=frozenset)
    author: str | None = None
    created_date: datetime | None = None
    rating: float | None = None

    @classmethod
    def from_payload(cls, item: Mapping[str, Any]) -> "CodeExample":
        tags = item.get("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)
        return cls(
            id=str(item.get("id") or ""),
            title=str(item.get("title") or ""),
            description=str(item.get("description") or ""),
            code=str(item.get("code") or ""),
            category=_coerce_enum(VBACategory, item.get("category")),
            difficulty=_coerce_enum(Difficulty, item.get("difficulty")),
            tags=frozenset(str(t) for t in tags),
            author=item.get("author") or None,
            created_date=parse_timestamp(item.get("createdDate")),
            rating=item.get("rating"),
        )


@dataclass(frozen=True)
class LibraryRecord:
    id: str
    name: str
    description: str
    office_app: OfficeApplication | str
    api_version: str
    examples: tuple[CodeExample, ...] = ()
    documentation: str = ""
    last_updated: datetime | None = None
    trust_score: float = 5
    usage_count: int = 0

    @classmethod
    def from_payload(cls, item: Mapping[str, Any]) -> "LibraryRecord":
        examples = item.get("examples") or []
        return cls(
            id=str(item.get("id") or ""),
            name=str(item.get("name") or ""),
            description=str(item.get("description") or ""),
            office_app=_coerce_enum(OfficeApplication, item.get("officeApp")),
            api_version=str(item.get("apiVersion") or ""),
            examples=tuple(
                CodeExample.from_payload(ex)
                for ex in examples
                if isinstance(ex, Mapping)
            ),
            documentation=str(item.get("documentation") or ""),
            last_updated=parse_timestamp(item.get("lastUpdated")),
            trust_score=coerce_number(item.get("trustScore"), 5),
            usage_count=int(coerce_number(item.get("usageCount"), 0)),
        )

    def difficulty_counts(self) -> dict[Difficulty, int]:
        counts = {level: 0 for level in Difficulty}
        for ex in self.examples:
            for level in Difficulty:
                if ex.difficulty == level:
                    counts[level] += 1
        return counts


@dataclass(frozen=True)
class SearchOutcome:
    results: tuple[LibraryRecord, ...]
    total_count: int
    search_time_ms: int
    suggestions: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class ExtractedDocument:
    text: str
    headers: tuple[str, ...]
    code_blocks: tuple[str, ...]
