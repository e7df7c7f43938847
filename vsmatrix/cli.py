"""Command line interface for the solution/project post-processor."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List
import sys

from core.console import Console

from .config_loader import Settings
from .postprocessor import Postprocessor


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="vsmatrix", description="Expand Visual Studio solutions into a platform/target/variant matrix")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: vsmatrix.toml/.json/.yaml in the working directory)",
    )
    parser.add_argument(
        "--log",
        "-l",
        choices=list(Console.LEVELS),
        default=None,
        help="Set log level (default: from settings, else error)",
    )
    parser.add_argument("--dry-run", "-n", action="store_true", help="Report changes without writing files")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("matrix", help="List the generated configuration names")

    solution_parser = subparsers.add_parser("solution", help="Rewrite a solution file")
    solution_parser.add_argument("path", type=Path, help="Solution (.sln) file")
    solution_parser.add_argument("--in-place", "-i", action="store_true", help="Write the result back to the file")

    project_parser = subparsers.add_parser("project", help="Rewrite project files")
    project_parser.add_argument("paths", type=Path, nargs="+", help="Project (.csproj) files")
    project_parser.add_argument("--in-place", "-i", action="store_true", help="Write results back to the files")

    return parser.parse_args(list(argv))


def _load_settings(args: Namespace, workspace: Path) -> Settings:
    if args.config is not None:
        return Settings.from_file(args.config)
    return Settings.discover(workspace)


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    workspace = Path.cwd()

    settings = _load_settings(args, workspace)
    console = Console(level=args.log or settings.global_config.log_level, dry_run=args.dry_run)
    postprocessor = Postprocessor.from_settings(settings, console)

    if args.command == "matrix":
        return _handle_matrix(postprocessor)
    if args.command == "solution":
        return _handle_files(postprocessor, [args.path], console, args, kind="solution")
    if args.command == "project":
        return _handle_files(postprocessor, list(args.paths), console, args, kind="project")
    raise ValueError(f"Unknown command: {args.command}")


def _handle_matrix(postprocessor: Postprocessor) -> int:
    for name in postprocessor.matrix.names():
        print(name)
    return 0


def _handle_files(
    postprocessor: Postprocessor,
    paths: List[Path],
    console: Console,
    args: Namespace,
    *,
    kind: str,
) -> int:
    status = 0
    for path in paths:
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                content = handle.read()
        except OSError as exc:
            console.error(f"Unable to read {path}: {exc}")
            status = 1
            continue

        if kind == "solution":
            result = postprocessor.rewrite_solution(str(path), content)
        else:
            result = postprocessor.rewrite_project(str(path), content)

        if result == content:
            console.info(f"{path}: unchanged")
            continue
        if args.dry_run:
            console.dry(f"would rewrite {path}")
        elif args.in_place:
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(result)
            console.info(f"{path}: rewritten")
        else:
            sys.stdout.write(result)

    if postprocessor.failures:
        status = 1
    return status


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
