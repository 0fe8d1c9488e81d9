"""vba-docs core library.

This package resolves VBA libraries for Office applications against a
remote catalog, fetches their documentation and renders search results and
documentation as plain text for tool-server responses.

Extraction is pattern based on purpose: documentation pages are scanned
with regexes, never parsed into a DOM.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
