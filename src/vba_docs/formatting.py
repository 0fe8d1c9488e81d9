from __future__ import annotations

import re
from typing import Any, Iterable, Sequence

from .models import (
    CodeExample,
    Difficulty,
    LibraryRecord,
    OfficeApplication,
    SearchOutcome,
    VBACategory,
    label,
)

NO_RESULTS_MESSAGE = "No VBA libraries found matching your query."
NO_EXAMPLES_MESSAGE = "No VBA code examples found."
RECORD_SEPARATOR = "\n---\n"

_WHITESPACE_RUN = re.compile(r"\s+")


def display_library_id(record_id: str) -> str:
    """Derive the ``/vba/<slug>`` shown to users for a record id."""

    slug = _WHITESPACE_RUN.sub("-", record_id.lower())
    # Canonical ids already carry the prefix.
    if slug.startswith("/vba/"):
        slug = slug[len("/vba/") :]
    return f"/vba/{slug}"


def _sort_key(record: LibraryRecord) -> tuple[float, int, float]:
    updated = float("-inf")
    if record.last_updated is not None:
        updated = record.last_updated.timestamp()
    return (record.trust_score, len(record.examples), updated)


def filter_and_rank(
    records: Iterable[LibraryRecord],
    *,
    office_app: OfficeApplication | str | None = None,
    category: VBACategory | str | None = None,
    max_results: int | None = None,
) -> list[LibraryRecord]:
    """Filter, cap and sort records for display.

    Order matters: filters first, then the ``max_results`` cap (keeping the
    first N in catalog order), and only then the ranking sort by trust
    score, example count and last update, all descending.
    """

    selected = list(records)
    if office_app:
        selected = [r for r in selected if r.office_app == office_app]
    if category:
        selected = [
            r for r in selected if any(ex.category == category for ex in r.examples)
        ]
    if max_results:
        selected = selected[:max_results]
    selected.sort(key=_sort_key, reverse=True)
    return selected


def _format_record(
    record: LibraryRecord,
    *,
    show_examples: bool,
    show_trust_score: bool,
) -> str:
    examples_count = len(record.examples)
    lines = [
        f"**{record.name}**",
        f"- **Office App**: {label(record.office_app)}",
        f"- **API Version**: {record.api_version}",
        f"- **Examples**: {examples_count} total",
    ]

    if show_examples and examples_count > 0:
        counts = record.difficulty_counts()
        for level in Difficulty:
            lines.append(f"  - {level.value}: {counts[level]}")

    if show_trust_score:
        lines.append(f"- **Trust Score**: {record.trust_score}/10")

    updated = record.last_updated.strftime("%x") if record.last_updated else "unknown"
    lines.extend(
        [
            f"- **Description**: {record.description}",
            f"- **Library ID**: {display_library_id(record.id)}",
            f"- **Last Updated**: {updated}",
        ]
    )
    return "\n".join(lines) + "\n" + RECORD_SEPARATOR


def format_results(
    records: Sequence[LibraryRecord],
    *,
    office_app: OfficeApplication | str | None = None,
    category: VBACategory | str | None = None,
    show_examples: bool = False,
    show_trust_score: bool = False,
    max_results: int | None = None,
) -> str:
    ranked = filter_and_rank(
        records,
        office_app=office_app,
        category=category,
        max_results=max_results,
    )
    return "\n\n".join(
        _format_record(
            r,
            show_examples=show_examples,
            show_trust_score=show_trust_score,
        )
        for r in ranked
    )


def format_search_outcome(outcome: SearchOutcome, **options: Any) -> str:
    """Render a search outcome with a count header and timing footer.

    An outcome without results renders as its error message, if any.
    ``options`` are passed through to :func:`format_results`.
    """

    if not outcome.results:
        return outcome.error or NO_RESULTS_MESSAGE

    out = f"Available VBA Libraries ({len(outcome.results)} found):\n\n"
    out += format_results(outcome.results, **options)

    if outcome.search_time_ms:
        out += f"\nSearch completed in {outcome.search_time_ms}ms."
    if outcome.suggestions:
        out += f"\n\nSuggestions: {', '.join(outcome.suggestions)}"
    return out


def _format_example(idx: int, example: CodeExample) -> str:
    lines = [
        f"### {idx}. {example.title or example.id or 'Untitled'}",
        f"- **Category**: {label(example.category)}",
        f"- **Difficulty**: {label(example.difficulty)}",
    ]
    if example.tags:
        lines.append(f"- **Tags**: {', '.join(sorted(example.tags))}")
    if example.author:
        lines.append(f"- **Author**: {example.author}")
    if example.description:
        lines.append("")
        lines.append(example.description)
    lines.extend(["", "```vba", example.code.strip(), "```"])
    return "\n".join(lines)


def format_code_examples(examples: Sequence[CodeExample]) -> str:
    if not examples:
        return NO_EXAMPLES_MESSAGE
    return "\n\n".join(
        _format_example(idx, ex) for idx, ex in enumerate(examples, start=1)
    )
