from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from i18nsite.changelog import update_changelog
from i18nsite.git import GitError, GitProvider
from i18nsite.hook import run_precommit
from i18nsite.moddata import generate_mod_data
from i18nsite.progress import update_progress_data
from i18nsite.settings import Settings
from i18nsite.template import merge_json_template

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run_merge(default_path: Path, ja_path: Path, in_place: bool) -> Path:
    out_path = ja_path if in_place else Path.cwd() / "out.json"
    return merge_json_template(default_path, ja_path, out_path)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    common.add_argument(
        "--root",
        default=None,
        help="Repository root containing translations/ (default: current directory)",
    )

    parser = argparse.ArgumentParser(
        description=(
            "Build utilities for the translation website\n"
            "\n"
            "Merge a translation into its template:\n"
            "  i18nsite merge translations/<slug>/i18n/default.json "
            "translations/<slug>/i18n/ja.json --in-place\n"
        ),
        parents=[common],
        formatter_class=argparse.RawTextHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    merge_parser = subparsers.add_parser(
        "merge",
        help="Write ja.json values into the default.json layout, keeping comments",
        parents=[common],
    )
    merge_parser.add_argument("default_json", metavar="DEFAULT_JSON_PATH")
    merge_parser.add_argument("ja_json", metavar="JA_JSON_PATH")
    merge_parser.add_argument(
        "--in-place",
        action="store_true",
        help="Overwrite JA_JSON_PATH instead of writing ./out.json",
    )

    subparsers.add_parser(
        "mod-data", help="Generate website/_data/auto_mods.yml", parents=[common]
    )
    subparsers.add_parser(
        "progress",
        help="Update website/_data/auto_progress.yml for staged slugs",
        parents=[common],
    )
    subparsers.add_parser(
        "changelog",
        help="Update website/_data/auto_changelog.yml",
        parents=[common],
    )
    subparsers.add_parser(
        "precommit",
        help="Validate, regenerate data files and gate the commit",
        parents=[common],
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    root = Path(args.root) if args.root else Path.cwd()
    try:
        if args.command == "merge":
            out_path = run_merge(
                Path(args.default_json), Path(args.ja_json), in_place=args.in_place
            )
            print(f"Done. Wrote to {out_path}")
            return 0

        settings = Settings.from_env(root=root)
        provider = GitProvider(settings.root, timeout=settings.git_timeout)
        if args.command == "mod-data":
            print(generate_mod_data(settings))
        elif args.command == "progress":
            print(update_progress_data(settings, provider))
        elif args.command == "changelog":
            message = update_changelog(settings, provider)
            if message:
                print(message)
        elif args.command == "precommit":
            result = run_precommit(settings, provider)
            print("-- pre-commit report --")
            for note in result.report.notes:
                print(f"note: {note}")
            for warning in result.report.warnings:
                print(f"warning: {warning}")
            for line in result.messages:
                print(line)
            return result.exit_code
    except json.JSONDecodeError as exc:
        parser.error(f"invalid JSON: {exc}")
    except (ValidationError, ValueError, FileNotFoundError, GitError) as exc:
        parser.error(str(exc))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
