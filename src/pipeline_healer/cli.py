"""CLI entry point for Pipeline Healer."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .config import Config, load_config
from .healing import SelfHealingManager
from .models import AnalysisResult, FailureSeverity, SelfHealingReport
from .tracing import init_tracing

console = Console()

SEVERITY_STYLES = {
    FailureSeverity.CRITICAL: "bold red",
    FailureSeverity.HIGH: "red",
    FailureSeverity.MEDIUM: "yellow",
    FailureSeverity.LOW: "dim",
}


@click.group()
@click.version_option(package_name="pipeline-healer")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Config file path")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, debug: bool) -> None:
    """Pipeline Healer - diagnose and self-heal CI/CD pipeline failures."""
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    config = load_config(Path(config_path) if config_path else None)
    ctx.obj["config"] = config

    # Initialize Langfuse tracing
    tracing = init_tracing(config)
    ctx.obj["tracing"] = tracing
    ctx.call_on_close(tracing.flush)

    if config.langfuse.enabled:
        console.print("[dim]Langfuse tracing enabled[/]")


@main.command()
@click.argument("log_file", type=click.File("r"))
@click.option("--platform", "-p", help="CI/CD platform (github, gitlab, circleci, aws)")
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def analyze(ctx: click.Context, log_file, platform: str | None, output_format: str) -> None:
    """Classify a pipeline failure log and suggest fixes."""
    manager = _build_manager(ctx.obj["config"], platform)
    result = manager.analyze_failure(log_file.read())

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(f"\n[bold blue]🔍 Failure analysis[/] [dim](platform: {manager.platform})[/]\n")
    _show_analysis(result)


@main.command()
@click.argument("log_file", type=click.File("r"))
@click.option("--platform", "-p", help="CI/CD platform (github, gitlab, circleci, aws)")
@click.option("--workdir", "-w", type=click.Path(exists=True, file_okay=False), default=".", help="Directory to run fixes in")
@click.option("--apply", "apply_fixes", is_flag=True, help="Run fix scripts instead of previewing them")
@click.pass_context
def fix(ctx: click.Context, log_file, platform: str | None, workdir: str, apply_fixes: bool) -> None:
    """Preview or apply automated fixes for a failure log."""
    config = ctx.obj["config"]
    log = log_file.read()

    if not apply_fixes:
        manager = _build_manager(config, platform)
        result = manager.analyze_failure(log)
        _show_fix_preview(result)
        return

    manager = _build_manager(config, platform, auto_fix=True)
    console.print(f"\n[bold blue]🔧 Applying fixes in:[/] {workdir}\n")

    with console.status("[yellow]Running fix scripts...[/]"):
        result, attempts = manager.heal(log, Path(workdir))

    if not attempts:
        console.print("[yellow]No automated fixes available for this failure.[/]\n")
        return

    failed = 0
    for attempt in attempts:
        if attempt.success:
            console.print(f"[green]✓ {escape(attempt.message)}[/]")
        else:
            failed += 1
            console.print(f"[red]✗ {escape(attempt.message)}[/]")

    console.print(f"\n[bold]Applied {len(attempts) - failed}/{len(attempts)} fixes[/]\n")
    if failed:
        ctx.exit(1)


@main.command()
@click.argument("pipeline_file", type=click.File("r"))
@click.option("--platform", "-p", help="CI/CD platform (github, gitlab, circleci, aws)")
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.pass_context
def report(ctx: click.Context, pipeline_file, platform: str | None, output_format: str) -> None:
    """Score a pipeline definition for self-healing best practices."""
    manager = _build_manager(ctx.obj["config"], platform)
    result = manager.generate_self_healing_report(manager.platform, pipeline_file.read())

    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    _show_report(result, manager.platform)


def _build_manager(config: Config, platform: str | None, auto_fix: bool | None = None) -> SelfHealingManager:
    """Create a manager with command-line overrides applied."""
    overrides = {}
    if platform:
        overrides["platform"] = platform
    if auto_fix is not None:
        overrides["auto_fix"] = auto_fix

    if overrides:
        config = config.model_copy(update={"healing": config.healing.model_copy(update=overrides)})

    return SelfHealingManager.from_config(config)


def _show_analysis(result: AnalysisResult) -> None:
    """Render failures and their suggestions as a table."""
    table = Table(title="Detected Failures")
    table.add_column("Type", style="cyan")
    table.add_column("Severity")
    table.add_column("Confidence", justify="right")
    table.add_column("Auto-fix")
    table.add_column("Location", style="dim", max_width=30)
    table.add_column("Message", max_width=50)

    for suggestion in result.suggestions:
        failure = suggestion.failure
        style = SEVERITY_STYLES.get(failure.severity, "")
        table.add_row(
            failure.type.value,
            f"[{style}]{failure.severity.value}[/]",
            f"{suggestion.confidence}%",
            "yes" if suggestion.auto_fix_possible else "-",
            failure.location or "-",
            escape(failure.message[:50]),
        )

    console.print(table)

    top = result.suggestions[0]
    console.print(f"\n[bold]Most likely cause:[/] {escape(top.failure.description)}")
    for fix in top.fixes:
        console.print(f"  • {escape(fix.description)}")
        for step in fix.manual_steps:
            console.print(f"    [dim]- {escape(step)}[/]")
    console.print()


def _show_fix_preview(result: AnalysisResult) -> None:
    """Show the scripts that --apply would run."""
    shown: set = set()

    for suggestion in result.suggestions:
        if not suggestion.auto_fix_possible or suggestion.failure.type in shown:
            continue
        shown.add(suggestion.failure.type)

        script_fix = next(f for f in suggestion.fixes if f.has_script)
        console.print(Panel(
            Syntax(script_fix.automated_script, "bash"),
            title=f"{suggestion.failure.type.value}: {script_fix.description}",
            subtitle=f"confidence: {suggestion.confidence}%",
        ))

    if not shown:
        console.print("[yellow]No automated fixes available for this failure.[/]\n")
        return

    console.print(f"\n[dim]Run with --apply to execute {len(shown)} fix script(s)[/]\n")


def _show_report(result: SelfHealingReport, platform: str) -> None:
    """Render the resilience scorecard."""
    score = result.self_healing_score
    color = "green" if score >= 80 else ("yellow" if score >= 50 else "red")
    console.print(f"\n[bold blue]🩺 Self-healing report[/] [dim](platform: {platform})[/]")
    console.print(f"[bold]Score:[/] [{color}]{score}/100[/]\n")

    if not result.vulnerabilities:
        console.print("[bold green]✓ No resilience gaps found![/]\n")
        return

    table = Table(title="Resilience Gaps")
    table.add_column("Gap", style="cyan")
    table.add_column("Severity", style="yellow")
    table.add_column("Recommendation", max_width=60)

    for vulnerability in result.vulnerabilities:
        table.add_row(vulnerability.type, vulnerability.severity, escape(vulnerability.recommendation))

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
