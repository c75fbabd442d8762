# main.py
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import steam
from config import Settings, setup_logging
from heuristics import empty_summary
from llm import summarise_reviews

app = typer.Typer(add_completion=False)
console = Console()
logger = logging.getLogger(__name__)


def _print_games(term: str, games: list) -> None:
    if not games:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(title=f"Steam results for {term!r}", expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("App ID", no_wrap=True, ratio=1)
    table.add_column("Name", style="bold", overflow="fold", ratio=4)
    table.add_column("Released", no_wrap=True, ratio=2)
    for g in games:
        table.add_row(str(g.appid), g.name, g.released or "—")
    console.print(table)


def _print_summary(app_id: str, count: int, summary: dict, source: str) -> None:
    positivity = summary.get("positivity")
    pct = "—" if positivity is None else f"{positivity:.0%}"
    playtime = summary.get("playtimeAvgHrs")
    body = (
        f"[bold]{summary.get('verdict')}[/bold]  ({pct})\n"
        f"{summary.get('overall')}\n"
        f"Avg. playtime: {'—' if playtime is None else f'{playtime} h'}\n"
        f"Reviews: {count}  •  Source: {source}"
    )
    console.print(Panel(body, title=f"App {app_id}", expand=False))

    table = Table(expand=True, box=box.SIMPLE_HEAVY)
    table.add_column("Pros", overflow="fold", ratio=1)
    table.add_column("Cons", overflow="fold", ratio=1)
    pros, cons = summary.get("pros") or [], summary.get("cons") or []
    for i in range(max(len(pros), len(cons))):
        table.add_row(
            f"✅ {pros[i]}" if i < len(pros) else "",
            f"❌ {cons[i]}" if i < len(cons) else "",
        )
    if pros or cons:
        console.print(table)

    keywords = summary.get("topKeywords") or []
    if keywords:
        console.print("[cyan]Keywords:[/cyan] " + ", ".join(keywords))


@app.callback()
def _main(log_level: str = typer.Option("WARNING", help="Logging level for the CLI")):
    setup_logging(log_level.upper())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default from HOST)"),
    port: Optional[int] = typer.Option(None, help="Port (default from PORT)"),
    debug: bool = typer.Option(False, help="Run Flask in debug mode"),
):
    """Start the web app and its JSON API."""
    from server import create_app

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    if not settings.ai_enabled:
        logger.warning("No Gemini API key found; summaries will use the local heuristic")
    create_app(settings).run(host=host or settings.host, port=port or settings.port, debug=debug)


@app.command()
def search(
    term: str = typer.Argument(..., help="Game title to look up"),
    fmt: str = typer.Option("table", "--format", case_sensitive=False, help="Output: table|json"),
):
    """Search the Steam store by name."""
    settings = Settings.from_env()
    try:
        games = steam.search_games(term, timeout=settings.steam_timeout)
    except Exception as e:
        console.print(f"[red]Search failed:[/red] {e}")
        raise typer.Exit(code=1)

    if fmt.lower() == "json":
        console.print_json(json.dumps({"results": [g.to_dict() for g in games]}, ensure_ascii=False))
    else:
        _print_games(term, games)


@app.command()
def reviews(
    app_id: str = typer.Argument(..., help="Steam app id"),
    count: int = typer.Option(200, min=1, max=steam.MAX_REVIEWS, help="Number of reviews to fetch"),
    lang: str = typer.Option(steam.DEFAULT_LANGUAGE, help="|".join(steam.LANGUAGES)),
    fmt: str = typer.Option("table", "--format", case_sensitive=False, help="Output: table|json"),
    out: Optional[Path] = typer.Option(None, help="Save the result to a JSON file"),
):
    """Fetch recent reviews and summarise them (Gemini when a key is set)."""
    settings = Settings.from_env()
    lang = steam.normalize_language(lang)

    with console.status("Fetching reviews..."):
        found = steam.fetch_reviews(app_id, max_count=count, lang=lang, timeout=settings.steam_timeout)

    if found:
        with console.status("Summarising reviews..."):
            summary, source = summarise_reviews(
                found, app_id, api_key=settings.api_key, model_name=settings.text_model
            )
    else:
        summary, source = empty_summary(), "heuristic"

    result = {
        "count": len(found),
        "appId": app_id,
        "lang": lang,
        "summary": summary,
        "source": source,
    }

    if fmt.lower() == "json":
        console.print_json(json.dumps(result, ensure_ascii=False))
    else:
        _print_summary(app_id, len(found), summary, source)

    if out:
        out.write_text(json.dumps(result, indent=2, ensure_ascii=False), encoding="utf-8")
        console.print(f"[green]Saved to {out}[/green]")


if __name__ == "__main__":
    app()
