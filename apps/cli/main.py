"""CLI application for dupdeps."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from core.duplicates import get_sorted_groups, get_statistics
from core.errors import DupDepsError
from core.models import DuplicateGroup, DuplicateInstance, DupReason, Statistics
from core.parse_node import load_project
from core.tree import build_lock_index, build_tree, render_tree

console = Console(highlight=False)

ROOT_PATH_LABEL = "<root>"
STATS_LABEL_WIDTH = 22

REASON_STYLES = {
    DupReason.ROOT: "green",
    DupReason.BUNDLED: "yellow",
    DupReason.NOT_HOISTED: "red",
    DupReason.OTHER_HOISTED: "yellow",
    DupReason.INSTALL_ORDER: "red",
    DupReason.HIGHER_INSTALLED: "yellow",
}


def setup_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def get_output_settings(members: list[DuplicateInstance]) -> tuple[int, int, int]:
    """Column widths for version, range and reason."""
    max_version = max((len(str(m.version)) for m in members), default=0)
    max_range = max(
        (len(r) for m in members for r in m.version_ranges), default=0
    )
    max_reason = max((len(str(m.reason)) for m in members), default=0)
    return max_version, max_range, max_reason


def format_path(path: str) -> str:
    return path or ROOT_PATH_LABEL


def print_groups(groups: list[DuplicateGroup]) -> None:
    """Print every group with one aligned row per installed instance."""
    if groups:
        console.print("Duplicate dependencies:", style="red")
    else:
        console.print("No duplicate dependencies found.", style="green")

    for group in groups:
        console.print(escape(group.name), style="bold yellow")
        version_width, range_width, reason_width = get_output_settings(group.members)

        for member in group.members:
            style = REASON_STYLES[member.reason]
            version = escape(str(member.version).ljust(version_width))
            reason = str(member.reason).ljust(reason_width)
            rows = list(zip(member.version_ranges, member.paths))
            first_range, first_path = rows[0]

            console.print(
                f"[{style}]{version}[/]  "
                f"{escape(first_range.ljust(range_width))}  "
                f"[{style}]{reason}[/]  "
                f"{escape(format_path(first_path))}",
                soft_wrap=True,
            )
            # Shared instances: one extra row per additional parent
            for version_range, path in rows[1:]:
                console.print(
                    f"{'':{version_width}}  "
                    f"{escape(version_range.ljust(range_width))}  "
                    f"{'':{reason_width}}  "
                    f"{escape(format_path(path))}",
                    soft_wrap=True,
                )


def print_statistics(stats: Statistics) -> None:
    """Print totals and the per-reason breakdown."""
    console.print()
    console.print(f"{'Total dependencies:':{STATS_LABEL_WIDTH}}{stats.total_installed}")
    console.print(f"{'Duplicates:':{STATS_LABEL_WIDTH}}{stats.total_duplicated}")
    console.print(f"{'Avoidable:':{STATS_LABEL_WIDTH}}{stats.total_avoidable}")

    for reason in DupReason:
        count = stats.by_reason.get(reason)
        if reason is DupReason.ROOT or not count:
            continue
        label = f"{reason}:".ljust(STATS_LABEL_WIDTH)
        console.print(f"[{REASON_STYLES[reason]}]{label}[/]{count}")


def format_json_output(groups: list[DuplicateGroup], stats: Statistics) -> str:
    """Format JSON output."""
    report = {
        "groups": [
            {
                "name": group.name,
                "members": [
                    {
                        "version": member.version,
                        "versionRanges": member.version_ranges,
                        "paths": member.paths,
                        "reason": str(member.reason),
                    }
                    for member in group.members
                ],
            }
            for group in groups
        ],
        "statistics": {
            "totalInstalled": stats.total_installed,
            "totalDuplicated": stats.total_duplicated,
            "totalAvoidable": stats.total_avoidable,
            "perReasonCounts": {
                str(reason): count for reason, count in stats.by_reason.items()
            },
        },
    }
    return json.dumps(report, indent=2)


app = typer.Typer(
    name="dupdeps",
    help="dupdeps - Explain why npm packages are installed more than once",
    add_completion=False,
)


@app.command()
def report(
    path: Path = typer.Option(
        Path("."), "--path", "-C", help="Project directory containing package.json and package-lock.json"
    ),
    format_type: str = typer.Option("text", "--format", help="Output format: text or json"),
    show_tree: bool = typer.Option(False, "--tree", help="Print the logical dependency tree first"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """dupdeps - Report duplicate dependencies of the project in the current directory."""
    setup_logging(verbose)
    console.no_color = no_color

    if format_type not in ("text", "json"):
        console.print(f"Error: Unsupported format: {format_type}", style="red", markup=False)
        raise typer.Exit(1)

    try:
        project = load_project(path)
        tree = build_tree(project.manifest, project.lock)
        lock_index = build_lock_index(project.manifest, project.lock)
        groups = get_sorted_groups(tree, lock_index)
        stats = get_statistics(tree, groups)
    except DupDepsError as e:
        console.print(f"Error: {e}", style="red", markup=False, soft_wrap=True)
        raise typer.Exit(1)

    if show_tree:
        console.print(render_tree(tree))

    if format_type == "json":
        console.print(format_json_output(groups, stats), markup=False, soft_wrap=True)
        return

    print_groups(groups)
    print_statistics(stats)


if __name__ == "__main__":
    app()
