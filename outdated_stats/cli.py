"""
Command-line interface for the outdated dependency stats tool.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .ignore import build_ignore_list, dependabot_directory
from .reporting import (
    export_monorepo_summary_csv,
    export_outdated_csv,
    export_worksheets,
    log_typed_summary,
    save_results_json,
)
from .resolvers import DEFAULT_TIMEOUT, RESOLVERS, get_resolver
from .stats import collect_monorepo_stats, failed_packages, get_dependency_stats, summarize_packages


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dependency-outdated-stats",
        description="Report how many dependencies are behind by a major, minor or patch version",
    )

    parser.add_argument(
        "--working-directory",
        default=".",
        help="Directory containing package.json. Default: current directory"
    )

    parser.add_argument(
        "--package-manager",
        choices=sorted(RESOLVERS),
        default="yarn",
        help="Package manager used to list outdated dependencies. Default: yarn"
    )

    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="NAME",
        help="Dependency name to ignore (repeatable, case-insensitive)"
    )

    parser.add_argument(
        "--no-dependabot",
        action="store_true",
        help="Do not read ignore settings from .github/dependabot.yml"
    )

    parser.add_argument(
        "--monorepo",
        action="store_true",
        help="Collect stats for every package under --packages-dir"
    )

    parser.add_argument(
        "--packages-dir",
        default="packages",
        help="Folder holding monorepo packages, relative to the working directory. Default: packages"
    )

    parser.add_argument(
        "--output-file",
        default=None,
        help="Write results as JSON to this file"
    )

    parser.add_argument(
        "--output-dir",
        default="./output",
        help="Output directory for CSV and worksheet exports. Default: ./output"
    )

    parser.add_argument(
        "--get-csv",
        action="store_true",
        help="Export outdated dependencies (or the monorepo summary) to CSV"
    )

    parser.add_argument(
        "--get-worksheets",
        action="store_true",
        help="Export outdated dependencies to an Excel file with one sheet per severity"
    )

    parser.add_argument(
        "--log-results",
        action="store_true",
        help="Print the full results as JSON"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Timeout in seconds for the package manager command. Default: {DEFAULT_TIMEOUT}"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def _print_stats(stats) -> None:
    print(f"Counts: {json.dumps(stats.overall.counts.to_dict())}")
    print(f"Percents: {json.dumps(stats.overall.percents.to_dict())}")


def _run_single(args, working_directory: Path, resolver, ignore) -> int:
    stats = get_dependency_stats(working_directory, resolver, ignore=ignore)
    log_typed_summary(stats)
    _print_stats(stats)

    if args.log_results:
        print(json.dumps(stats.to_dict(), indent=2))

    if args.output_file:
        results_file = save_results_json(stats, Path(args.output_file))
        print(f"Results saved to: {results_file}")

    name = working_directory.name or "project"
    if args.get_csv:
        csv_file = export_outdated_csv(stats.overall, Path(args.output_dir), name)
        if csv_file:
            print(f"Outdated dependencies saved to: {csv_file}")
    if args.get_worksheets:
        excel_file = export_worksheets(stats.overall, Path(args.output_dir), name)
        if excel_file:
            print(f"Worksheets saved to: {excel_file}")
    return 0


def _run_monorepo(args, working_directory: Path, resolver, ignore_for) -> int:
    results = collect_monorepo_stats(
        working_directory,
        resolver,
        packages_dir=args.packages_dir,
        ignore_for=ignore_for,
        show_progress=sys.stderr.isatty(),
    )
    for result in results:
        if result.ok:
            log_typed_summary(result.stats, name=result.name)
            print(f"{result.name}:")
            _print_stats(result.stats)
        else:
            print(f"{result.name}: failed ({result.error})", file=sys.stderr)

    summary = summarize_packages(results)
    if args.log_results:
        print(json.dumps(summary, indent=2))
    if args.output_file:
        results_file = save_results_json(summary, Path(args.output_file))
        print(f"Results saved to: {results_file}")
    if args.get_csv:
        summary_file = export_monorepo_summary_csv(results, Path(args.output_dir))
        print(f"Package summary saved to: {summary_file}")

    failed = failed_packages(results)
    if results and len(failed) == len(results):
        print("Error: stats could not be collected for any package", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.timeout <= 0:
        parser.error("--timeout must be positive")

    working_directory = Path(args.working_directory).resolve()
    if not working_directory.is_dir():
        print(f"Error: working directory {working_directory} does not exist", file=sys.stderr)
        return 1

    # dependabot.yml lives at the repository root, which is the directory the tool runs from
    repo_root = Path.cwd()

    def ignore_for(path: Path):
        return build_ignore_list(
            repo_root=repo_root,
            directory=dependabot_directory(path, repo_root),
            extra=args.ignore,
            use_dependabot=not args.no_dependabot,
        )

    resolver = get_resolver(args.package_manager, timeout=args.timeout)

    try:
        if args.monorepo:
            return _run_monorepo(args, working_directory, resolver, ignore_for)
        return _run_single(args, working_directory, resolver, ignore_for(working_directory))
    except Exception as e:
        print(f"\nError collecting dependency stats: {e}", file=sys.stderr)
        logger.debug("Traceback", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
