"""Entry points the tool server calls.

Each function takes the raw tool arguments, validates them and returns the
text to send back; nothing here raises for bad input or upstream failures.
The ``run_*`` variants also report a :class:`ToolStatus` for callers that
need to branch on the outcome, such as the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .catalog import CatalogClient
from .formatting import format_search_outcome
from .models import Difficulty, OfficeApplication, VBACategory
from .validation import validate_library_id, validate_parameters

logger = logging.getLogger(__name__)

INVALID_PARAMETERS_MESSAGE = (
    "Invalid parameters: libraryName is required; officeApp must be one of "
    + ", ".join(app.value for app in OfficeApplication)
    + "; difficulty must be one of "
    + ", ".join(level.value for level in Difficulty)
    + "."
)


class ToolStatus(str, Enum):
    OK = "ok"
    INVALID = "invalid"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ToolResult:
    status: ToolStatus
    text: str


def invalid_library_id_message(library_id: str) -> str:
    return (
        f"Invalid VBA library ID: {library_id!r}. Expected the form "
        "'/vba/<name>' using lowercase letters, digits and hyphens."
    )


def docs_not_found_message(library_id: str) -> str:
    return (
        f"Documentation not found for {library_id}. Use resolve-library to "
        "find a valid VBA library ID."
    )


def run_resolve_library(
    client: CatalogClient,
    library_name: str,
    *,
    office_app: OfficeApplication | str | None = None,
    category: VBACategory | str | None = None,
    show_examples: bool = True,
    show_trust_score: bool = True,
) -> ToolResult:
    params = {"libraryName": library_name, "officeApp": office_app}
    if not validate_parameters(params):
        return ToolResult(ToolStatus.INVALID, INVALID_PARAMETERS_MESSAGE)

    outcome = client.search_libraries(
        library_name, office_app=office_app, category=category
    )
    text = format_search_outcome(
        outcome,
        office_app=office_app,
        category=category,
        show_examples=show_examples,
        show_trust_score=show_trust_score,
        max_results=client.cfg.max_results,
    )
    status = ToolStatus.UNAVAILABLE if outcome.error else ToolStatus.OK
    return ToolResult(status, text)


def resolve_library(
    client: CatalogClient,
    library_name: str,
    *,
    office_app: OfficeApplication | str | None = None,
    category: VBACategory | str | None = None,
    show_examples: bool = True,
    show_trust_score: bool = True,
) -> str:
    return run_resolve_library(
        client,
        library_name,
        office_app=office_app,
        category=category,
        show_examples=show_examples,
        show_trust_score=show_trust_score,
    ).text


def run_get_documentation(
    client: CatalogClient,
    library_id: str,
    *,
    topic: str | None = None,
    office_app: OfficeApplication | str | None = None,
    difficulty: Difficulty | str | None = None,
    tokens: int | None = None,
) -> ToolResult:
    if not validate_library_id(library_id):
        return ToolResult(ToolStatus.INVALID, invalid_library_id_message(library_id))

    # libraryName is not part of this call; the id stands in for it.
    params = {
        "libraryName": library_id,
        "officeApp": office_app,
        "difficulty": difficulty,
    }
    if not validate_parameters(params):
        return ToolResult(ToolStatus.INVALID, INVALID_PARAMETERS_MESSAGE)

    docs = client.fetch_documentation(
        library_id,
        topic=topic,
        office_app=office_app,
        difficulty=difficulty,
        tokens=tokens or client.cfg.default_tokens,
    )
    if docs is None:
        logger.info("No documentation returned for %s", library_id)
        return ToolResult(ToolStatus.UNAVAILABLE, docs_not_found_message(library_id))
    return ToolResult(ToolStatus.OK, docs)


def get_documentation(
    client: CatalogClient,
    library_id: str,
    *,
    topic: str | None = None,
    office_app: OfficeApplication | str | None = None,
    difficulty: Difficulty | str | None = None,
    tokens: int | None = None,
) -> str:
    return run_get_documentation(
        client,
        library_id,
        topic=topic,
        office_app=office_app,
        difficulty=difficulty,
        tokens=tokens,
    ).text
