"""Main entry point for ppurge."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigurationError, PurgeConfig
from .purger import PurgeOutcome
from .runner import PurgeRun
from .sizes import format_size


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="ppurge",
        description="Find and purge files matching include/exclude glob rules",
    )

    parser.add_argument(
        "--root",
        "-r",
        type=Path,
        default=None,
        help="Directory to use as root of the file search. Uses cwd when not provided",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        dest="rules_path",
        help="Rule file to use. Defaults to .ppurge under the root",
    )
    parser.add_argument(
        "--filter",
        "-f",
        default=None,
        help="Semicolon separated list of include/exclude rules to act as an inline rule file",
    )
    parser.add_argument(
        "--purge",
        "-p",
        action="store_true",
        default=None,
        help="Delete matched files. Without this flag ppurge only does a dry run",
    )
    parser.add_argument(
        "--size",
        "-s",
        action="store_true",
        default=None,
        dest="compute_size",
        help="Compute file and directory sizes during the search (slower)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to YAML settings file",
    )
    parser.add_argument(
        "--save-settings",
        action="store_true",
        help="Write the effective settings to the settings file and exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_const",
        const="DEBUG",
        default=None,
        dest="log_level",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def cmd_scan(run: PurgeRun, console: Console) -> None:
    """Scan the root and print every match.

    Args:
        run: Prepared run.
        console: Console for output.

    """
    with console.status("Searching files") as status:
        for event in run.scan():
            status.update(f"Searching {escape(str(event.path.parent))}")
            if event.match is None:
                continue
            if event.match.exclude:
                console.print(f"[green]keep:[/green] {escape(str(event.path))}")
            else:
                console.print(f"[red]purge:[/red] {escape(str(event.path))}")

    report = run.report
    if report.sized:
        console.print(
            f"found {report.include_count} purgable locations "
            f"([red]{format_size(report.total_size)}[/red]) in {report.elapsed_ms}ms"
        )
    else:
        console.print(f"found {report.include_count} purgable locations in {report.elapsed_ms}ms")


def cmd_purge(run: PurgeRun, console: Console) -> None:
    """Delete the matches of the previous scan.

    Args:
        run: Run that has been scanned.
        console: Console for output.

    """
    console.print("[bold red]PURGING[/bold red]")
    failures: list[tuple[Path, str]] = []

    with console.status("Deleting files") as status:
        for result in run.purge():
            path = escape(str(result.path))
            status.update(f"Deleting {path}")
            if result.outcome is PurgeOutcome.DELETED:
                console.print(f"[red]purged:[/red] {path}")
            elif result.outcome is PurgeOutcome.SKIPPED_SYMLINK:
                console.print(f"Skipping symlink: {path}")
            else:
                console.print(f"[yellow]failed:[/yellow] {path} ({escape(result.error or '')})")
                failures.append((result.path, result.error or ""))

    if failures:
        table = Table(title=f"Failed to purge {len(failures)} locations")
        table.add_column("Path", style="red")
        table.add_column("Reason", style="dim")
        for path, reason in failures:
            table.add_row(str(path), reason)
        console.print(table)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    console = Console()

    try:
        config = PurgeConfig.load(args.settings).with_overrides(
            root=args.root,
            rules_path=args.rules_path,
            filter=args.filter,
            purge=args.purge,
            compute_size=args.compute_size,
            log_level=args.log_level,
        )
        if args.save_settings:
            settings_path = args.settings or PurgeConfig.get_config_path()
            config.save(settings_path)
            console.print(f"[green]Saved settings: {escape(str(settings_path))}[/green]")
            return 0
        run = PurgeRun(config, console=console)
    except (ConfigurationError, OSError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    try:
        cmd_scan(run, console)
        if config.purge:
            cmd_purge(run, console)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        return 130
    except OSError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
