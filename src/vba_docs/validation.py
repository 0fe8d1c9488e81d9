from __future__ import annotations

import re
from typing import Any, Mapping

from .models import Difficulty, OfficeApplication, label

_LIBRARY_ID = re.compile(r"/vba/[a-z0-9-]+")
_FORBIDDEN_ID_CHARS = re.compile(r"[<>:\"|?*]")
MIN_LIBRARY_ID_LEN = 8
MAX_LIBRARY_ID_LEN = 100

OFFICE_APPS = frozenset(app.value for app in OfficeApplication)
DIFFICULTIES = frozenset(level.value for level in Difficulty)


def validate_library_id(library_id: Any) -> bool:
    if not isinstance(library_id, str):
        return False
    if not _LIBRARY_ID.fullmatch(library_id):
        return False
    if not MIN_LIBRARY_ID_LEN <= len(library_id) <= MAX_LIBRARY_ID_LEN:
        return False
    return not _FORBIDDEN_ID_CHARS.search(library_id)


def validate_parameters(params: Mapping[str, Any]) -> bool:
    """Check inbound tool parameters.

    ``libraryName`` must be non-empty text; ``officeApp`` and ``difficulty``
    are optional but must name known enumeration members when given.
    """

    name = params.get("libraryName")
    if not name or not isinstance(name, str):
        return False

    office_app = params.get("officeApp")
    if office_app and label(office_app) not in OFFICE_APPS:
        return False

    difficulty = params.get("difficulty")
    if difficulty and label(difficulty) not in DIFFICULTIES:
        return False

    return True
