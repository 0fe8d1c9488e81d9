from __future__ import annotations

import argparse
import logging
import sys

from dotenv import find_dotenv, load_dotenv

from .catalog import CatalogClient
from .config import CatalogConfig, ConfigError
from .formatting import format_code_examples
from .models import Difficulty, OfficeApplication, VBACategory
from .tools import (
    ToolResult,
    ToolStatus,
    invalid_library_id_message,
    run_get_documentation,
    run_resolve_library,
)
from .validation import validate_library_id

_APPS = [app.value for app in OfficeApplication]
_CATEGORIES = [cat.value for cat in VBACategory]
_DIFFICULTIES = [level.value for level in Difficulty]


_EXIT_CODES = {
    ToolStatus.OK: 0,
    ToolStatus.INVALID: 2,
    ToolStatus.UNAVAILABLE: 3,
}


def _report(result: ToolResult) -> int:
    stream = sys.stdout if result.status is ToolStatus.OK else sys.stderr
    print(result.text, file=stream)
    return _EXIT_CODES[result.status]


def _add_library_id_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "library_id",
        help="VBA library ID, e.g. /vba/excel-worksheet",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="vba-docs")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Load settings from this .env file (default: ./.env if present)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    resolve_p = sub.add_parser(
        "resolve",
        help="Search the catalog for VBA libraries matching a name",
    )
    resolve_p.add_argument("library_name")
    resolve_p.add_argument("--office-app", choices=_APPS, default=None)
    resolve_p.add_argument("--category", choices=_CATEGORIES, default=None)
    resolve_p.add_argument(
        "--hide-examples",
        action="store_true",
        help="Omit the per-difficulty example breakdown",
    )
    resolve_p.add_argument(
        "--hide-trust-score",
        action="store_true",
        help="Omit trust scores from the listing",
    )

    docs_p = sub.add_parser("docs", help="Fetch documentation for a library")
    _add_library_id_arg(docs_p)
    docs_p.add_argument("--topic", default=None)
    docs_p.add_argument("--office-app", choices=_APPS, default=None)
    docs_p.add_argument("--difficulty", choices=_DIFFICULTIES, default=None)
    docs_p.add_argument(
        "--tokens",
        type=int,
        default=None,
        help="Approximate size budget in characters (default: VBA_DEFAULT_TOKENS)",
    )

    examples_p = sub.add_parser("examples", help="List code examples for a library")
    _add_library_id_arg(examples_p)
    examples_p.add_argument("--difficulty", choices=_DIFFICULTIES, default=None)
    examples_p.add_argument("--category", choices=_CATEGORIES, default=None)
    examples_p.add_argument("--limit", type=int, default=None)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    load_dotenv(args.env_file or find_dotenv(usecwd=True))

    try:
        config = CatalogConfig.from_env()
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    client = CatalogClient(config)

    if args.cmd == "resolve":
        return _report(
            run_resolve_library(
                client,
                args.library_name,
                office_app=args.office_app,
                category=args.category,
                show_examples=not bool(args.hide_examples),
                show_trust_score=not bool(args.hide_trust_score),
            )
        )

    if args.cmd == "docs":
        return _report(
            run_get_documentation(
                client,
                args.library_id,
                topic=args.topic,
                office_app=args.office_app,
                difficulty=args.difficulty,
                tokens=args.tokens,
            )
        )

    if not validate_library_id(args.library_id):
        print(invalid_library_id_message(args.library_id), file=sys.stderr)
        return 2

    if args.cmd == "examples":
        examples = client.fetch_code_examples(
            args.library_id,
            difficulty=args.difficulty,
            category=args.category,
            limit=args.limit,
        )
        print(format_code_examples(examples))
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
