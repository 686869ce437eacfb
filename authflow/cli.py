"""CLI entry point for the harness."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from playwright.async_api import async_playwright
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from authflow.data.loader import load_test_cases
from authflow.executor.executor import Executor
from authflow.flows.registry import FLOWS, get_flow
from authflow.machines.coverage import coverage_for
from authflow.machines.export import to_dict, to_mermaid
from authflow.models.config import HarnessConfig, ReplayMode, resolve_replay_mode
from authflow.replay.recorder import record_flow_har
from authflow.reporter.reporter import Reporter
from authflow.utils.browser import launch_browser

console = Console()

FLOW_CHOICE = click.Choice(sorted(FLOWS))


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> HarnessConfig:
    try:
        return HarnessConfig.load(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'authflow init' to create a default config.")
        sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Model-based login & registration UI tests"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="authflow.json", help="Config file path")
@click.option("--flow", "-f", "flows", multiple=True, type=FLOW_CHOICE,
              help="Flow to run (repeatable, default: all configured flows)")
@click.option("--replay-mode", type=click.Choice([m.value for m in ReplayMode]),
              default=None, help="Override network replay (default: UPDATE_SNAPSHOT, then config)")
def run(config: str, flows: tuple[str, ...], replay_mode: Optional[str]) -> None:
    """Run the data-driven flow tests."""
    cfg = _load_config(config)
    if replay_mode:
        cfg.replay_mode = ReplayMode(replay_mode)
    else:
        cfg.replay_mode = resolve_replay_mode(default=cfg.replay_mode)

    executor = Executor(cfg, Path("runs"))
    result = asyncio.run(executor.execute(list(flows) or None))
    reports = Reporter(cfg).generate_reports(result)

    table = Table(title=f"Run {result.run_id} ({result.replay_mode})")
    table.add_column("Flow", style="bold")
    table.add_column("Case")
    table.add_column("Result")
    table.add_column("Final state")
    table.add_column("Failure")
    colors = {"pass": "green", "fail": "red", "error": "red"}
    for r in result.test_results:
        color = colors.get(r.result, "yellow")
        table.add_row(r.flow, f"{r.test_id}: {r.test_name}",
                      f"[{color}]{r.result.upper()}[/{color}]",
                      r.final_state, r.failure_reason or "")
    console.print(table)
    console.print(
        f"[green]{result.passed} passed[/green], [red]{result.failed} failed[/red], "
        f"[red]{result.errors} errors[/red] in {result.duration_seconds}s"
    )
    for fmt, path in reports.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")

    if result.failed or result.errors:
        sys.exit(1)


@cli.command("record-har")
@click.option("--config", "-c", default="authflow.json", help="Config file path")
@click.option("--flow", "-f", "flows", multiple=True, type=FLOW_CHOICE,
              help="Flow to record (repeatable, default: all configured flows)")
def record_har(config: str, flows: tuple[str, ...]) -> None:
    """Record one HAR file per flow by running its cases against the live site."""
    cfg = _load_config(config)
    names = list(flows) or cfg.flows

    async def _record() -> dict[str, list[str]]:
        failures = {}
        async with async_playwright() as p:
            browser = await launch_browser(p, headless=cfg.headless)
            try:
                for name in names:
                    flow = get_flow(name)
                    cases = load_test_cases(Path(cfg.test_data_dir) / flow.data_file,
                                            flow.case_model)
                    failures[name] = await record_flow_har(
                        browser, flow, cases, Path(cfg.har_dir) / flow.har_file,
                        cfg.base_url, cfg.timeouts,
                    )
            finally:
                await browser.close()
        return failures

    failures = asyncio.run(_record())
    for name, failed in failures.items():
        har = Path(cfg.har_dir) / get_flow(name).har_file
        if failed:
            console.print(f"[yellow]{name}: recorded {har}, cases not passing: "
                          f"{', '.join(failed)}[/yellow]")
        else:
            console.print(f"[green]{name}: recorded {har}[/green]")


@cli.command()
@click.option("--config", "-c", default="authflow.json", help="Config file path")
@click.option("--flow", "-f", "flows", multiple=True, type=FLOW_CHOICE,
              help="Flow to show (repeatable, default: all)")
@click.option("--format", "fmt", type=click.Choice(["mermaid", "json"]), default="mermaid",
              help="Output format")
@click.option("--coverage", "show_coverage", is_flag=True,
              help="Show which states and events the test data exercises")
@click.option("--output", "-o", default=None, help="Directory to write diagrams into")
def machines(config: str, flows: tuple[str, ...], fmt: str, show_coverage: bool,
             output: Optional[str]) -> None:
    """Export the flow state machines."""
    names = list(flows) or sorted(FLOWS)
    cfg = HarnessConfig.load(config) if Path(config).exists() else HarnessConfig()

    for name in names:
        flow = get_flow(name)
        machine = flow.create_machine()
        rendered = to_mermaid(machine) if fmt == "mermaid" else json.dumps(to_dict(machine), indent=2)

        if output:
            out_dir = Path(output)
            out_dir.mkdir(parents=True, exist_ok=True)
            path = out_dir / f"{machine.id}.{'mmd' if fmt == 'mermaid' else 'json'}"
            path.write_text(rendered)
            console.print(f"[green]Wrote {path}[/green]")
        else:
            console.print(f"[bold]{machine.id}[/bold]")
            console.print(rendered, markup=False, highlight=False)

        if show_coverage:
            cases = load_test_cases(Path(cfg.test_data_dir) / flow.data_file, flow.case_model)
            report = coverage_for(machine, cases)
            table = Table(title=f"{machine.id} coverage")
            table.add_column("Event", style="bold")
            table.add_column("Cases")
            for event, ids in report.events.items():
                table.add_row(event, ", ".join(ids) or "[red]none[/red]")
            console.print(table)
            if report.uncovered_states:
                console.print(f"[yellow]Uncovered terminal states: "
                              f"{', '.join(report.uncovered_states)}[/yellow]")


@cli.command()
@click.option("--base-url", "-u", default="https://practice.expandtesting.com",
              help="Site under test")
def init(base_url: str) -> None:
    """Create a default configuration file."""
    config_path = Path("authflow.json")
    if config_path.exists():
        if not click.confirm("authflow.json already exists. Overwrite?"):
            return

    cfg = HarnessConfig(base_url=base_url)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nRecord network traffic once, then run against the recording:")
    console.print("  [blue]authflow record-har[/blue]")
    console.print("  [blue]authflow run[/blue]")


if __name__ == "__main__":
    cli()
