"""
Flavr - CLI Entry Point.

Usage:
    flavr generate "quick chicken stir-fry"   Resolve one recipe request
    flavr match "beef stir fry with soy"      Show which template an intent hits
    flavr health                              Check configuration and store
    flavr --help                              Show help
"""

import asyncio
import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="flavr",
    help="Flavr - Tiered recipe resolution: cache, templates, then full generation.",
    add_completion=False,
)
console = Console()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def generate(
    intent: str = typer.Argument(..., help="What the user wants to cook"),
    servings: int = typer.Option(4, "--servings", "-s", min=1, help="Number of servings"),
    time_budget: Optional[int] = typer.Option(None, "--time", "-t", help="Maximum cook time in minutes"),
    dietary: list[str] = typer.Option([], "--dietary", "-d", help="Dietary requirement (repeatable)"),
    must_use: list[str] = typer.Option([], "--use", "-u", help="Ingredient that must be used (repeatable)"),
    avoid: list[str] = typer.Option([], "--avoid", "-a", help="Ingredient to avoid (repeatable)"),
    cuisine: Optional[str] = typer.Option(None, "--cuisine", "-c", help="Preferred cuisine(s), comma separated"),
    entitlement: str = typer.Option("free", "--entitlement", "-e", help="Caller entitlement tier"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw recipe JSON"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log all LLM prompts to prompt_logs/"),
) -> None:
    """Resolve a single recipe request through the tiered pipeline."""
    from flavr.config import get_settings
    from flavr.errors import GenerationError
    from flavr.llm.client import OpenAIBackend
    from flavr.llm.prompt_logger import enable_prompt_logging, get_session_log_dir
    from flavr.models import GenerationRequest
    from flavr.observability import init_langsmith
    from flavr.pipeline import GenerationOrchestrator
    from flavr.store import SupabaseRecipeStore

    settings = get_settings()
    _configure_logging(settings.log_level)
    init_langsmith()

    if log_prompts:
        enable_prompt_logging(True)

    store = SupabaseRecipeStore() if settings.has_store else None
    orchestrator = GenerationOrchestrator.from_settings(settings, OpenAIBackend(), store)
    request = GenerationRequest(
        intent=intent,
        servings=servings,
        time_budget=time_budget,
        dietary_needs=dietary,
        must_use=must_use,
        avoid=avoid,
        cuisine_preference=cuisine,
        entitlement=entitlement,
    )

    try:
        with Live(Spinner("dots", text="Cooking..."), console=console, transient=True):
            result = asyncio.run(orchestrator.resolve(request))
    except GenerationError as e:
        console.print(f"\n[red]❌ {e}[/red]")
        raise typer.Exit(1)

    recipe = result.recipe
    if as_json:
        console.print_json(json.dumps(recipe.model_dump(mode="json", exclude_none=True)))
    else:
        body = "\n".join(
            [
                f"[dim]{recipe.description or ''}[/dim]",
                "",
                "[bold]Ingredients[/bold]",
                *(f"  • {item}" for item in recipe.ingredients),
                "",
                "[bold]Method[/bold]",
                *(f"  {n}. {step}" for n, step in enumerate(recipe.instructions, start=1)),
            ]
        )
        console.print(Panel(body, title=recipe.title, border_style="green"))

    source = result.source.value
    if result.template_name:
        source = f"{source} ({result.template_name})"
    console.print(f"[dim]Served by: {source}  correlation: {result.correlation_id}[/dim]")

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]📝 Prompts logged to: {log_dir}[/dim]")


@app.command()
def match(
    intent: str = typer.Argument(..., help="Intent to score against the template catalog"),
) -> None:
    """Show template confidence for an intent without calling any model."""
    from flavr.config import get_settings
    from flavr.templates import TemplateMatcher

    settings = get_settings()
    matcher = TemplateMatcher(
        threshold=settings.template_confidence_threshold,
        reference_cost=settings.full_generation_reference_cost,
    )

    table = Table(title="Template confidence")
    table.add_column("Template")
    table.add_column("Pattern")
    table.add_column("Confidence", justify="right")
    for template in matcher.templates:
        table.add_row(template.name, template.pattern_text, f"{matcher.confidence(template, intent):.0%}")
    console.print(table)

    result = matcher.match(intent)
    if result.use_template and result.template is not None:
        console.print(
            f"✅ Would use [bold]{result.template.name}[/bold] "
            f"(saves ~${result.estimated_savings:.4f})"
        )
    else:
        console.print(f"ℹ️  No template over {matcher.threshold:.0%}; would fall through to full generation")


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from flavr.config import get_settings

    console.print("\n[bold]Flavr Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.flavr_env}")
        console.print(f"   Log level: {settings.log_level}")

        # Check OpenAI
        if settings.openai_api_key.startswith("sk-"):
            console.print("✅ OpenAI API key configured")
        else:
            console.print("⚠️  OpenAI API key may be invalid")

        # Check LangSmith
        if settings.langchain_tracing_v2 and settings.langchain_api_key:
            console.print("✅ LangSmith tracing enabled")
        else:
            console.print("ℹ️  LangSmith tracing disabled")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    # Check Supabase
    if not settings.has_store:
        console.print("ℹ️  Supabase not configured; cache tier disabled")
        console.print("\n[green]All checks passed![/green]")
        return

    from flavr.errors import CacheLookupError
    from flavr.store import SupabaseRecipeStore

    try:
        stats = asyncio.run(SupabaseRecipeStore().cache_statistics())
    except CacheLookupError as e:
        console.print(f"❌ Recipe store unreachable: {e}")
        raise typer.Exit(1)

    console.print(f"✅ Recipe store: {stats['total_recipes']} cacheable recipes")
    for cuisine, count in sorted(stats["cuisine_distribution"].items()):
        console.print(f"   {cuisine}: {count}")
    console.print(f"   Average cook time: {stats['average_cook_time']} min")

    console.print("\n[green]All checks passed![/green]")


@app.command()
def version() -> None:
    """Show version information."""
    from flavr import __version__

    console.print(f"Flavr version {__version__}")


if __name__ == "__main__":
    app()
