"""
Library Relink CLI - Entry point

Points the track locations of a Rekordbox collection export at a new folder
of audio files, either as a dry-run report or by writing the relinked XML.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from rich.markup import escape
from rich.table import Table

from library_relink.core import (
    Config,
    ensure_directories,
    get_console,
    get_log_file_path,
    load_config,
    log,
    setup_loguru,
)
from library_relink.domain.candidates.scanner import scan_candidates
from library_relink.domain.errors import DescriptorParseError, RelinkError
from library_relink.domain.mapping.filters import TrackFilter, parse_status_filter
from library_relink.domain.session import RelinkSession


def read_descriptor(path: Path) -> str:
    """Read a descriptor exactly as stored (no newline translation).

    Raises:
        DescriptorParseError: If the file is not UTF-8 encoded
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise DescriptorParseError(
            f"{path} is not UTF-8 encoded: {e.reason} at byte {e.start}"
        ) from e


def open_session(
    descriptor_path: Path, folder: Path, config: Config, base_path: Optional[str] = None
) -> Optional[RelinkSession]:
    """Load a descriptor and scan a candidate folder into a new session.

    The base path defaults to the configured one, then to the scanned folder
    itself, so candidate relative paths resolve to the files just found.

    Returns:
        The session, or None if the descriptor could not be parsed

    Raises:
        DescriptorParseError: If the descriptor is not UTF-8 encoded
    """
    session = RelinkSession(
        base_path=base_path
        or config.relink.base_path
        or folder.expanduser().resolve().as_posix(),
        export_filename=config.relink.export_filename,
    )

    result = session.load_descriptor(read_descriptor(descriptor_path))
    if not result.ok:
        log(f"Could not parse {descriptor_path}: {result.error}", level="error")
        return None

    session.load_candidates(
        scan_candidates(
            folder,
            supported_formats=config.candidates.supported_formats,
            recursive=config.candidates.scan_recursive,
        )
    )
    return session


def run_relink(
    descriptor: str,
    folder: str,
    config: Config,
    base_path: Optional[str] = None,
    output: Optional[str] = None,
    threshold: Optional[float] = None,
    apply: bool = False,
) -> int:
    """Auto-match tracks to files in a folder and optionally write the result.

    Args:
        descriptor: Path to the collection XML
        folder: Folder containing the new audio files
        config: Loaded configuration
        base_path: Root for rewritten locations (default: config, then folder)
        output: Output file or directory (default: next to the descriptor)
        threshold: Minimum score for a match (default: config)
        apply: If True, write the relinked XML; if False, dry run only

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    dry_run = not apply
    descriptor_path = Path(descriptor).expanduser()
    min_score = config.relink.auto_match_threshold if threshold is None else threshold

    try:
        session = open_session(descriptor_path, Path(folder), config, base_path)
        if session is None:
            return 1

        log(f"{'DRY RUN - ' if dry_run else ''}Relinking {descriptor_path.name} onto {folder}")
        log(f"Base path: {session.base_path or '(none)'}")

        for mapping in session.auto_match(min_score):
            track = session.track(mapping.track_id)
            get_console().print(
                f"  ✓ {track.display_artist} - {track.display_title}", markup=False
            )
            get_console().print(f"    → {mapping.resolved_location}", markup=False)

        summary = session.summary()
        print()
        print("=" * 50)
        print(f"Total tracks: {summary.total}")
        print(f"  Matched:   {summary.matched}")
        print(f"  Unmatched: {summary.unmatched}")

        if dry_run:
            if summary.matched:
                print()
                print("Run with --apply to write the relinked collection")
            return 0

        target = Path(output).expanduser() if output else descriptor_path.parent
        written = session.export_to(target)
        log(f"Wrote {written}", level="success")
        return 0

    except (RelinkError, OSError) as e:
        log(f"Error: {e}", level="error")
        return 1


def run_suggest(
    descriptor: str,
    folder: str,
    config: Config,
    limit: Optional[int] = None,
    status: str = "all",
    query: str = "",
) -> int:
    """Print the top candidate files for each track.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        track_filter = TrackFilter(status=parse_status_filter(status), query=query)
        session = open_session(Path(descriptor).expanduser(), Path(folder), config)
        if session is None:
            return 1
    except (ValueError, RelinkError, OSError) as e:
        log(f"Error: {e}", level="error")
        return 1

    k = limit or config.relink.suggestion_count
    table = Table(title=f"Suggestions ({len(session.candidates)} candidate files)")
    table.add_column("Track")
    table.add_column("Candidate")
    table.add_column("Score", justify="right")

    for track in session.filtered_tracks(track_filter):
        suggestions = session.suggestions(track.id, k)
        label = escape(f"{track.display_artist} - {track.display_title}")
        if not suggestions:
            table.add_row(label, "[dim]no match[/dim]", "")
            continue
        for position, item in enumerate(suggestions):
            table.add_row(
                label if position == 0 else "",
                escape(item.candidate.relative_path),
                f"{item.score:.0%}",
            )

    get_console().print(table)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="library-relink",
        description="Library Relink - Point a DJ collection at a new set of audio files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config.toml (default: standard lookup)")

    subparsers = parser.add_subparsers(dest="subcommand", required=True, help="Available commands")

    relink_parser = subparsers.add_parser(
        "relink", help="Match tracks to files and write a relinked collection"
    )
    relink_parser.add_argument("descriptor", help="Collection XML exported by the DJ software")
    relink_parser.add_argument("folder", help="Folder containing the new audio files")
    relink_parser.add_argument("--base-path", help="Root the new locations resolve under")
    relink_parser.add_argument("--output", help="Output file or directory")
    relink_parser.add_argument(
        "--threshold", type=float, help="Minimum match score between 0 and 1"
    )
    relink_parser.add_argument(
        "--apply", action="store_true", help="Actually write the XML (default: dry run)"
    )

    suggest_parser = subparsers.add_parser("suggest", help="Show candidate files per track")
    suggest_parser.add_argument("descriptor", help="Collection XML exported by the DJ software")
    suggest_parser.add_argument("folder", help="Folder containing the new audio files")
    suggest_parser.add_argument("--limit", type=int, help="Suggestions per track")
    suggest_parser.add_argument(
        "--status", default="all", help="all, matched, ignored or unmatched"
    )
    suggest_parser.add_argument("--search", default="", help="Only tracks containing this text")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the library-relink command."""
    args = build_parser().parse_args(argv)

    config = load_config(Path(args.config).expanduser() if args.config else None)
    ensure_directories()
    setup_loguru(
        get_log_file_path(config),
        level=config.logging.level,
        console_output=config.logging.console_output,
    )
    logger.debug(f"Running {args.subcommand}")

    if args.subcommand == "relink":
        sys.exit(
            run_relink(
                args.descriptor,
                args.folder,
                config,
                base_path=args.base_path,
                output=args.output,
                threshold=args.threshold,
                apply=args.apply,
            )
        )
    elif args.subcommand == "suggest":
        sys.exit(
            run_suggest(
                args.descriptor,
                args.folder,
                config,
                limit=args.limit,
                status=args.status,
                query=args.search,
            )
        )


if __name__ == "__main__":
    main()
