"""Typer CLI for the Local SEO analyzer.

Commands cover full analyses, ad-hoc NAP comparison and normalization,
saved-analysis history and export, the Streamlit dashboard and setup.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from localseo.modules.local_seo.nap_matcher import NAPRecord, compare_nap, normalize_nap

console = Console()
app = typer.Typer(
    name="seo",
    help="Local SEO analyzer: NAP consistency, directory citations and on-page checks.",
    add_completion=False,
    no_args_is_help=True,
)

CONFIG_PATH = "config/settings.yaml"


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_app(init_database: bool = True):
    from localseo.app import LocalSEOApp
    seo_app = LocalSEOApp(config_path=CONFIG_PATH)
    seo_app.initialize(init_database=init_database)
    return seo_app


def _bool_cell(value: Optional[bool]) -> str:
    if value is True:
        return "[green]✔[/green]"
    if value is False:
        return "[red]✘[/red]"
    return "-"


def _score_style(score: float) -> str:
    if score > 70:
        return "green"
    if score > 40:
        return "yellow"
    return "red"


def _print_report(report: dict) -> None:
    score = report.get("score") or {}
    overall = score.get("overall", 0)
    console.print(Panel(
        f"[bold {_score_style(overall)}]{overall}/100[/bold {_score_style(overall)}]",
        title=f"Local SEO Score: {report.get('business_name', '')}",
    ))

    cat_table = Table(title="Categories", show_header=True, header_style="bold magenta")
    cat_table.add_column("Category", style="cyan")
    cat_table.add_column("Score", justify="right")
    cat_table.add_column("Weight", justify="right")
    for name, cat in (score.get("categories") or {}).items():
        cat_table.add_row(
            name.replace("_", " ").title(), str(cat.get("score")), f"{cat.get('weight', 0):.0%}",
        )
    console.print(cat_table)

    citations = report.get("citation_analysis") or {}
    if citations.get("error"):
        console.print(f"[red]Citations failed:[/red] {citations['error']}")
    else:
        cit_table = Table(title="Citations", show_header=True, header_style="bold magenta")
        cit_table.add_column("Directory", style="cyan")
        cit_table.add_column("Found")
        cit_table.add_column("NAP match")
        cit_table.add_column("Confidence", justify="right")
        cit_table.add_column("Notes", max_width=40)
        for key, entry in citations.items():
            if not isinstance(entry, dict) or "found" not in entry:
                continue
            cit_table.add_row(
                entry.get("label") or key,
                _bool_cell(entry.get("found")),
                _bool_cell(entry.get("nap_match")) if entry.get("found") else "-",
                str(entry.get("nap_confidence", "")),
                entry.get("reason") or entry.get("url") or "",
            )
        console.print(cit_table)

    for section in ("gbp_analysis", "onpage_analysis", "speed_insights"):
        error = (report.get(section) or {}).get("error")
        if error:
            console.print(f"[yellow]⚠ {section}:[/yellow] {error}")

    recs = report.get("recommendations") or []
    if recs:
        rec_table = Table(title="Recommendations", show_header=True, header_style="bold magenta")
        rec_table.add_column("#", justify="right")
        rec_table.add_column("Impact")
        rec_table.add_column("Category")
        rec_table.add_column("Title", style="cyan")
        for i, rec in enumerate(recs, 1):
            rec_table.add_row(str(i), rec["impact"], rec["category"], rec["title"])
        console.print(rec_table)

    if report.get("ai_summary"):
        console.print(Panel(report["ai_summary"], title="Summary"))


# ------------------------------------------------------------------
# analyze
# ------------------------------------------------------------------
@app.command()
def analyze(
    business_name: str = typer.Argument(..., help="Business name as it should appear everywhere."),
    full_address: str = typer.Argument(..., help='Address as "street, city, ST ZIP".'),
    website_url: str = typer.Argument(..., help="Business website (http/https)."),
    phone: str = typer.Option("", "--phone", help="Business phone number."),
    no_save: bool = typer.Option(False, "--no-save", help="Do not store the analysis."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report JSON here."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run the full Local SEO analysis for a business."""
    _setup_logging(verbose)
    seo_app = _get_app()

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Running GBP, citation, on-page and speed analyses...", total=None)
        try:
            report = asyncio.run(seo_app.workflow.generate_report(
                business_name, full_address, website_url, phone=phone, save=not no_save,
            ))
        except ValueError as exc:
            console.print(f"[red]✘[/red] {exc}")
            raise typer.Exit(code=1)

    _print_report(report)
    if output:
        output.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
        console.print(f"[green]✔[/green] Report written to {output}")
    if report.get("analysis_id"):
        console.print(f"Saved as analysis #{report['analysis_id']}.")


# ------------------------------------------------------------------
# compare / normalize
# ------------------------------------------------------------------
@app.command()
def compare(
    source_name: str = typer.Argument(..., help="Trusted business name."),
    source_address: str = typer.Argument(..., help="Trusted address."),
    target_name: str = typer.Argument(..., help="Listing business name."),
    target_address: str = typer.Argument(..., help="Listing address."),
    source_phone: str = typer.Option("", "--source-phone", help="Trusted phone."),
    target_phone: str = typer.Option("", "--target-phone", help="Listing phone."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Compare two Name/Address/Phone records."""
    weights = _get_app(init_database=False).nap_weights
    result = compare_nap(
        NAPRecord(source_name, source_address, source_phone or None),
        NAPRecord(target_name, target_address, target_phone or None),
        weights,
    )
    if as_json:
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table(title="NAP Comparison", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Match")
    table.add_column("Score", justify="right")
    table.add_row("Name", _bool_cell(result.name_match), f"{result.details.name_score:.0f}")
    table.add_row("Address", _bool_cell(result.address_match), f"{result.details.address_score:.0f}")
    table.add_row("Phone", _bool_cell(result.phone_match), f"{result.details.phone_score:.0f}")
    console.print(table)
    verdict = "[green]MATCH[/green]" if result.overall_match else "[red]NO MATCH[/red]"
    console.print(f"Overall: {verdict}  confidence {result.confidence}%")


@app.command()
def normalize(
    name: str = typer.Argument(..., help="Business name."),
    address: str = typer.Argument("", help="Address."),
    phone: str = typer.Option("", "--phone", help="Phone number."),
) -> None:
    """Show the normalized form of a NAP record."""
    normalized = normalize_nap(NAPRecord(name, address, phone or None))
    table = Table(title="Normalized NAP", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field_name, value in normalized.to_dict().items():
        table.add_row(field_name, repr(value))
    console.print(table)


# ------------------------------------------------------------------
# history / show
# ------------------------------------------------------------------
@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of analyses to list."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """List saved analyses, newest first."""
    _setup_logging(verbose)
    _get_app()
    from localseo.modules.local_seo.analysis_store import get_all_analyses

    analyses = get_all_analyses(limit=limit)
    if not analyses:
        console.print("[yellow]No saved analyses yet.[/yellow] Run [bold]seo analyze[/bold] first.")
        return

    table = Table(title="Saved Analyses", show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right")
    table.add_column("Business", style="cyan")
    table.add_column("Address")
    table.add_column("Score", justify="right")
    table.add_column("Created")
    for a in analyses:
        score = a.get("overall_score")
        table.add_row(
            str(a["id"]), a["business_name"], a["full_address"],
            "-" if score is None else f"[{_score_style(score)}]{score}[/{_score_style(score)}]",
            (a.get("created_at") or "")[:19],
        )
    console.print(table)


@app.command()
def show(
    analysis_id: int = typer.Argument(..., help="Analysis ID from `seo history`."),
    export: Optional[str] = typer.Option(None, "--export", "-e", help="Export as html or json."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show one saved analysis, optionally exporting it."""
    _setup_logging(verbose)
    seo_app = _get_app()
    from localseo.modules.local_seo.analysis_store import get_analysis_by_id

    analysis = get_analysis_by_id(analysis_id)
    if analysis is None:
        console.print(f"[red]✘[/red] Analysis #{analysis_id} not found.")
        raise typer.Exit(code=1)

    _print_report(analysis["report"])
    if export:
        from localseo.modules.local_seo.report_generator import LocalSEOReportGenerator
        generator = LocalSEOReportGenerator(output_dir=seo_app.export_dir)
        fmt = export.lower()
        try:
            if fmt == "html":
                path = generator.save_report(generator.generate_html_report(analysis), fmt="html",
                                             filename=f"analysis_{analysis_id}")
            else:
                path = generator.save_report(generator.generate_json_report(analysis), fmt=fmt,
                                             filename=f"analysis_{analysis_id}")
        except ValueError as exc:
            console.print(f"[red]✘[/red] {exc}")
            raise typer.Exit(code=1)
        console.print(f"[green]✔[/green] Exported to {path}")


# ------------------------------------------------------------------
# dashboard
# ------------------------------------------------------------------
@app.command()
def dashboard(
    port: int = typer.Option(8501, "--port", "-p", help="Streamlit server port."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Launch the Streamlit dashboard."""
    _setup_logging(verbose)
    console.print(f"[bold cyan]Launching dashboard on port {port}...[/bold cyan]")
    import subprocess
    subprocess.run(
        ["streamlit", "run", "dashboard/app.py", "--server.port", str(port)],
        check=False,
    )


# ------------------------------------------------------------------
# setup / status
# ------------------------------------------------------------------
@app.command()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Create the database, data directories and an .env template."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]Local SEO Analyzer Setup[/bold cyan]"))

    console.print("\n[bold]Step 1: Data Directories[/bold]")
    for d in ("data", "data/exports"):
        Path(d).mkdir(parents=True, exist_ok=True)
        console.print(f"[green]✔[/green] {d}/")

    console.print("\n[bold]Step 2: Database[/bold]")
    from sqlalchemy.exc import SQLAlchemyError
    from localseo.database import init_db
    try:
        init_db()
        console.print("[green]✔[/green] Database tables created.")
    except SQLAlchemyError as exc:
        console.print(f"[red]✘[/red] Database error: {exc}")

    console.print("\n[bold]Step 3: Configuration[/bold]")
    if Path(CONFIG_PATH).exists():
        console.print(f"[green]✔[/green] {CONFIG_PATH} found.")
    else:
        console.print(f"[yellow]⚠[/yellow] {CONFIG_PATH} not found. Using defaults.")

    console.print("\n[bold]Step 4: Environment[/bold]")
    from localseo.utils.env_manager import EnvManager
    manager = EnvManager(".env")
    if manager.ensure_env_exists():
        console.print("[yellow]⚠[/yellow] Created .env template; fill in your API keys.")
    else:
        console.print("[green]✔[/green] .env file found.")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Run [bold]seo status[/bold] to verify configuration.")


@app.command()
def status(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show database, configuration and API key status."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]System Status[/bold cyan]"))

    table = Table(title="Component Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", min_width=25)
    table.add_column("Status", min_width=10)
    table.add_column("Details", max_width=50)

    from sqlalchemy import text as sa_text
    from sqlalchemy.exc import SQLAlchemyError
    from localseo.database import get_engine
    try:
        with get_engine().connect() as conn:
            conn.execute(sa_text("SELECT 1"))
        table.add_row("Database", "[green]✔ OK[/green]", "connected")
    except SQLAlchemyError as exc:
        table.add_row("Database", "[red]✘ Error[/red]", str(exc)[:50])

    if Path(CONFIG_PATH).exists():
        table.add_row("Configuration", "[green]✔ OK[/green]", "settings.yaml found")
    else:
        table.add_row("Configuration", "[yellow]⚠ Missing[/yellow]", "settings.yaml not found")

    from localseo.utils.env_manager import EnvManager
    for key, info in EnvManager(".env").get_status().items():
        if info["configured"]:
            table.add_row(key, "[green]✔ Set[/green]", info["masked_value"])
        elif info["required"]:
            table.add_row(key, "[red]✘ Missing[/red]", info["description"][:50])
        else:
            table.add_row(key, "[yellow]○ Optional[/yellow]", info["description"][:50])

    console.print(table)


def main() -> None:
    """Entry point for the ``seo`` console script."""
    app()


if __name__ == "__main__":
    main()
