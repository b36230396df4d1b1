"""Command-line interface for ngmap."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ngmap.analysis.orchestrator import clear_cache, run_analysis
from ngmap.contract.artifacts import GRAPH_FORMATS, REPORT_FORMATS, ReportFormat
from ngmap.errors import RootUnreadable
from ngmap.parse.treesitter_source import extract_source
from ngmap.report.graph_format import render_dot, render_mermaid
from ngmap.report.json_format import render_cycles_json, render_json
from ngmap.report.markdown import render_cycles_markdown, render_markdown
from ngmap.rules.config import ConfigError, load_config
from ngmap.rules.roles import classify_record
from ngmap.scan.files import scan_source_files
from ngmap.utils import relative_posix
from ngmap.verify.verify import verify_determinism

EXIT_OK = 0
EXIT_ERROR_CYCLES = 1
EXIT_FAILURE = 2
EXIT_NONDETERMINISTIC = 3


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _add_output_options(
    parser: argparse.ArgumentParser, formats: dict[str, ReportFormat], default: str
) -> None:
    parser.add_argument(
        "--format",
        choices=sorted(formats),
        default=default,
        help=f"Output format (default: {default})",
    )
    parser.add_argument(
        "--save",
        default=None,
        metavar="PATH",
        help="Write the output to PATH instead of stdout; a missing suffix "
        "is taken from the format",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Analyze every file without reading or writing the cache",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ngmap")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for per-file detail)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a project")
    _add_common_paths(analyze_parser)
    _add_output_options(analyze_parser, REPORT_FORMATS, "json")
    analyze_parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the analysis cache and exit",
    )

    cycles_parser = subparsers.add_parser(
        "cycles", help="Report dependency cycles only"
    )
    _add_common_paths(cycles_parser)
    _add_output_options(cycles_parser, REPORT_FORMATS, "json")

    graph_parser = subparsers.add_parser(
        "graph", help="Render the dependency graph as Mermaid or Graphviz DOT"
    )
    _add_common_paths(graph_parser)
    _add_output_options(graph_parser, GRAPH_FORMATS, "mermaid")

    files_parser = subparsers.add_parser("files", help="List analyzed source files")
    _add_common_paths(files_parser)

    inspect_parser = subparsers.add_parser(
        "inspect", help="Extract and classify a single file"
    )
    inspect_parser.add_argument("file", help="Source file to inspect")
    inspect_parser.add_argument(
        "--root",
        default=None,
        help="Project root (default: the file's directory)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that two fresh analyses agree"
    )
    _add_common_paths(verify_parser)

    return parser


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _emit(text: str, save: str | None, fmt: ReportFormat | None = None) -> None:
    if save is None:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    path = Path(save).expanduser()
    if fmt is not None and not path.suffix:
        path = path.with_suffix(fmt.suffix)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    sys.stderr.write(f"report written to {path}\n")


def _handle_analyze(root: Path, args: argparse.Namespace) -> int:
    if args.clear_cache:
        removed = clear_cache(root)
        sys.stderr.write("cache cleared\n" if removed else "no cache to clear\n")
        return EXIT_OK

    report = run_analysis(root, use_cache=not args.no_cache)
    if args.format == "md":
        text = render_markdown(report)
    else:
        text = render_json(report)
    _emit(text, args.save, REPORT_FORMATS[args.format])
    return EXIT_ERROR_CYCLES if report.has_error_cycles else EXIT_OK


def _handle_cycles(root: Path, args: argparse.Namespace) -> int:
    report = run_analysis(root, use_cache=not args.no_cache)
    if args.format == "md":
        text = render_cycles_markdown(report)
    else:
        text = render_cycles_json(report)
    _emit(text, args.save, REPORT_FORMATS[args.format])
    return EXIT_ERROR_CYCLES if report.has_error_cycles else EXIT_OK


def _handle_graph(root: Path, args: argparse.Namespace) -> int:
    report = run_analysis(root, use_cache=not args.no_cache)
    if args.format == "dot":
        text = render_dot(report.graph)
    else:
        text = render_mermaid(report.graph)
    _emit(text, args.save, GRAPH_FORMATS[args.format])
    for warning in report.warnings:
        where = f"{warning.path}: " if warning.path else ""
        sys.stderr.write(f"warning: {where}{warning.message}\n")
    return EXIT_ERROR_CYCLES if report.has_error_cycles else EXIT_OK


def _handle_files(root: Path) -> int:
    config = load_config(root)
    result = scan_source_files(
        root,
        extensions=config.extensions,
        exclude_dirs=config.exclude_dirs,
        test_suffixes=config.test_suffixes,
        exclude_patterns=config.exclude,
        respect_gitignore=config.respect_gitignore,
        nested_gitignore=config.nested_gitignore,
    )
    for path in result.files:
        sys.stdout.write(f"{relative_posix(path, result.root)}\n")
    for error in result.errors:
        sys.stderr.write(f"warning: {error}\n")
    return EXIT_OK


def _handle_inspect(file_arg: str, root_arg: str | None) -> int:
    file_path = Path(file_arg).expanduser().resolve()
    if not file_path.is_file():
        sys.stderr.write(f"error: not a file: {file_path}\n")
        return EXIT_FAILURE
    root = (
        Path(root_arg).expanduser().resolve() if root_arg else file_path.parent
    )
    config = load_config(root)
    record = classify_record(
        extract_source(file_path, root, extensions=config.extensions)
    )
    _emit(render_json(record), None)
    return EXIT_OK


def _handle_verify(root: Path) -> int:
    result = verify_determinism(root=root)
    if not result.ok:
        for part in result.mismatches:
            sys.stderr.write(f"mismatch: {part}\n")
        return EXIT_NONDETERMINISTIC
    return EXIT_OK


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "inspect":
        return _handle_inspect(args.file, args.root)

    root = Path(args.root).expanduser().resolve()

    if args.command == "analyze":
        return _handle_analyze(root, args)

    if args.command == "cycles":
        return _handle_cycles(root, args)

    if args.command == "graph":
        return _handle_graph(root, args)

    if args.command == "files":
        return _handle_files(root)

    if args.command == "verify":
        return _handle_verify(root)

    raise AssertionError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return _dispatch(args)
    except (RootUnreadable, ConfigError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_FAILURE
    except OSError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
