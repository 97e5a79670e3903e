"""
Larder - CLI Entry Point.

Usage:
    larder chat              Start interactive chat
    larder ask "..."         Send a single message
    larder tools             List the tool catalog
    larder parse "..."       Parse ingredient lines
    larder extract "..."     Recover JSON from model-style text
    larder health            Check configuration
"""

import asyncio
import json
import sys

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table

app = typer.Typer(
    name="larder",
    help="Larder - Your kitchen assistant for pantry, recipes, meal plans and grocery lists.",
    add_completion=False,
)
console = Console()

DEMO_RECIPES = [
    (
        {"name": "Pancakes", "meal_type": "breakfast", "servings": 4, "prep_time": 10, "cook_time": 15},
        [
            {"name": "flour", "amount": 2, "unit": "cup"},
            {"name": "milk", "amount": 1.5, "unit": "cup"},
            {"name": "eggs", "amount": 2, "unit": "pieces"},
        ],
    ),
    (
        {"name": "Chicken Stir Fry", "meal_type": "dinner", "servings": 2, "prep_time": 15, "cook_time": 10},
        [
            {"name": "chicken breast", "amount": 1, "unit": "lb"},
            {"name": "broccoli", "amount": 2, "unit": "cup"},
            {"name": "soy sauce", "amount": 3, "unit": "tbsp"},
        ],
    ),
    (
        {"name": "Caprese Salad", "meal_type": "lunch", "servings": 2, "prep_time": 10, "cook_time": 0},
        [
            {"name": "tomatoes", "amount": 3, "unit": "pieces"},
            {"name": "mozzarella", "amount": 8, "unit": "oz"},
            {"name": "basil", "amount": 1, "unit": "cup"},
        ],
    ),
]


def _store(user_id: str):
    """Supabase when configured, otherwise an in-memory store with demo recipes."""
    from larder.config import settings
    from larder.db import InMemoryKitchenStore

    if settings.has_supabase:
        from larder.db.supabase_store import SupabaseKitchenStore

        return SupabaseKitchenStore()

    store = InMemoryKitchenStore()

    async def seed() -> None:
        for recipe, ingredients in DEMO_RECIPES:
            await store.create_recipe(user_id, recipe, ingredients)

    asyncio.run(seed())
    return store


def _print_result(result) -> None:
    console.print(f"\n[bold green]Larder:[/bold green] {result.message}")
    for action in result.actions:
        mark = "✅" if action.success else "⚠️ "
        console.print(f"[dim]  {mark} {action.type}: {action.details}[/dim]")
    if result.navigate_to:
        console.print(f"[dim]  → {result.navigate_to}[/dim]")
    if result.staged:
        console.print(f"[dim]  staged: {json.dumps(result.staged, default=str)}[/dim]")


@app.command()
def chat(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Start an interactive chat session."""
    from larder.assistant import Assistant
    from larder.config import settings
    from larder.logging_setup import setup_logging
    from larder.models import UserContext

    setup_logging(settings.log_level, verbose)

    console.print(
        Panel.fit(
            "[bold green]Larder[/bold green]\n"
            "Your kitchen assistant.\n\n"
            "[dim]Type 'exit' or 'quit' to end the session.[/dim]",
            title="Welcome",
            border_style="green",
        )
    )

    context = UserContext(user_id=settings.dev_user_id)
    assistant = Assistant.from_store(_store(context.user_id))

    while True:
        try:
            user_input = console.input("\n[bold blue]You:[/bold blue] ").strip()

            if user_input.lower() in ("exit", "quit", "q"):
                console.print("\n[dim]Goodbye! 👋[/dim]")
                break

            if not user_input:
                continue

            with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
                result = asyncio.run(assistant.handle_turn(user_input, context))

            _print_result(result)

        except KeyboardInterrupt:
            console.print("\n\n[dim]Session interrupted. Goodbye! 👋[/dim]")
            break
        except Exception as e:
            console.print(f"\n[red]Error: {e}[/red]")


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    use_tools: bool = typer.Option(False, "--tools", "-t", help="Let the model answer with the tool catalog"),
) -> None:
    """Send a single message (useful for testing)."""
    from larder.assistant import Assistant
    from larder.config import settings
    from larder.logging_setup import setup_logging
    from larder.models import UserContext

    setup_logging(settings.log_level)

    context = UserContext(user_id=settings.dev_user_id)
    assistant = Assistant.from_store(_store(context.user_id))

    with Live(Spinner("dots", text="Thinking..."), console=console, transient=True):
        if use_tools:
            reply = asyncio.run(assistant.ask(message, context))
        else:
            result = asyncio.run(assistant.handle_turn(message, context))

    if use_tools:
        console.print(f"\n[bold green]Larder:[/bold green] {reply}")
    else:
        _print_result(result)


@app.command()
def tools() -> None:
    """List the tool catalog."""
    from larder.tools import CATALOG

    table = Table(title="Tool Catalog")
    table.add_column("Tool", style="bold blue")
    table.add_column("Parameters")
    table.add_column("Description", style="dim")

    for tool in CATALOG:
        schema = tool.definition().parameter_schema
        table.add_row(tool.name, ", ".join(schema["properties"]) or "-", tool.description)

    console.print(table)
    console.print(f"\n[dim]Total: {len(CATALOG)} tools[/dim]")


@app.command()
def parse(
    text: str = typer.Argument(None, help="Ingredient text (reads stdin if omitted)"),
) -> None:
    """Parse ingredient lines into quantity, unit and name."""
    from larder.tools import parse_batch

    result = parse_batch(text if text is not None else sys.stdin.read())

    table = Table(title="Parsed Ingredients")
    table.add_column("Quantity")
    table.add_column("Unit")
    table.add_column("Name", style="bold")

    for item in result.items:
        table.add_row(item.quantity or "-", item.unit or "-", item.name)

    console.print(table)
    console.print(
        f"\n[dim]{len(result.items)} of {result.candidate_lines} candidate lines, "
        f"confidence {result.confidence:.2f}[/dim]"
    )


@app.command()
def extract(
    text: str = typer.Argument(None, help="Model output (reads stdin if omitted)"),
) -> None:
    """Recover a JSON value from model-style text."""
    from larder.errors import ExtractionError
    from larder.llm import extract as extract_json

    try:
        value = extract_json(text if text is not None else sys.stdin.read())
    except ExtractionError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    console.print_json(json.dumps(value))


@app.command()
def health() -> None:
    """Check configuration."""
    from larder.config import get_settings

    console.print("\n[bold]Larder Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.larder_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.openai_api_key:
            console.print(f"✅ OpenAI configured ({settings.openai_model})")
        else:
            console.print("ℹ️  OpenAI not configured; keyword interpretation only")

        if settings.has_supabase:
            console.print("✅ Supabase configured")
        else:
            console.print("ℹ️  Supabase not configured; using in-memory store")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with valid values.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from larder import __version__

    console.print(f"Larder version {__version__}")


if __name__ == "__main__":
    app()
