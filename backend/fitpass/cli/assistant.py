"""CLI for talking to the FitPass API: list and run tools, ask the assistant."""
import asyncio
import json
from typing import Any, Dict, Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.syntax import Syntax
from rich.table import Table

app = typer.Typer(help="FitPass booking assistant CLI")
console = Console()


def _headers(token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


async def request_json(
    method: str,
    path: str,
    api_url: str,
    token: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    timeout: float = 30.0,
) -> Optional[Any]:
    """Call the API and return the decoded JSON body, or None on failure."""
    async with httpx.AsyncClient(timeout=timeout) as client:
        try:
            response = await client.request(
                method, f"{api_url}{path}", json=payload, headers=_headers(token)
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            console.print(f"[red]API error {e.response.status_code}: {e.response.text}[/red]")
            return None
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            return None


def create_tools_table(tools: list) -> Table:
    """Create a rich table of the assistant's tools."""
    table = Table(title="Assistant tools", show_lines=True)
    table.add_column("Tool", style="cyan bold", no_wrap=True)
    table.add_column("Arguments", style="magenta")
    table.add_column("Description", style="white")

    for spec in tools:
        properties = spec["input_schema"].get("properties", {})
        required = set(spec["input_schema"].get("required", []))
        arguments = ", ".join(
            f"{name}*" if name in required else name for name in properties
        )
        table.add_row(spec["name"], arguments or "-", spec["description"])

    return table


@app.command()
def tools(
    api_url: str = typer.Option("http://localhost:8000", help="API base URL"),
):
    """List the assistant's tools (* marks required arguments)."""
    data = asyncio.run(request_json("GET", "/api/tools", api_url))
    if data is None:
        raise typer.Exit(1)
    console.print(create_tools_table(data["tools"]))


@app.command()
def call(
    tool_name: str = typer.Argument(..., help="Tool name, e.g. searchClasses"),
    args: str = typer.Option("{}", "--args", help="Tool arguments as a JSON object"),
    api_url: str = typer.Option("http://localhost:8000", help="API base URL"),
    token: Optional[str] = typer.Option(None, envvar="FITPASS_SESSION_TOKEN", help="Clerk session token"),
):
    """
    Run one tool and print its JSON result.

    Examples:

        fitpass call searchClasses --args '{"category": "Yoga"}'

        fitpass call getUserBookings --args '{"type": "past"}'
    """
    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as e:
        console.print(f"[red]--args is not valid JSON: {e}[/red]")
        raise typer.Exit(2)

    data = asyncio.run(
        request_json("POST", f"/api/tools/{tool_name}", api_url, token, {"arguments": arguments})
    )
    if data is None:
        raise typer.Exit(1)

    console.print(Syntax(json.dumps(data, indent=2), "json", word_wrap=True))
    if "count" in data:
        console.print(f"\n[cyan]{data['count']} result(s)[/cyan]")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for the booking assistant"),
    provider: Optional[str] = typer.Option(None, help="LLM provider: 'claude' or 'ollama'"),
    api_url: str = typer.Option("http://localhost:8000", help="API base URL"),
    token: Optional[str] = typer.Option(None, envvar="FITPASS_SESSION_TOKEN", help="Clerk session token"),
):
    """
    Ask the booking assistant a question.

    Examples:

        fitpass ask "Any HIIT classes tomorrow?"

        fitpass ask "What have I booked?" --token $FITPASS_SESSION_TOKEN
    """
    payload: Dict[str, Any] = {"message": question}
    if provider:
        payload["provider"] = provider

    async def run():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("[cyan]Thinking...", total=None)
            return await request_json("POST", "/api/chat", api_url, token, payload, timeout=120.0)

    data = asyncio.run(run())
    if data is None:
        raise typer.Exit(1)

    console.print(Panel(data["answer"], title=f"[green]{data['provider']}", border_style="green"))
    for invocation in data.get("tool_invocations", []):
        summary = invocation.get("error") or f"{invocation.get('count')} result(s)"
        console.print(f"  [magenta]{invocation['name']}[/magenta] {invocation['arguments']} -> {summary}")


@app.command()
def sitemap(
    api_url: str = typer.Option("http://localhost:8000", help="API base URL"),
):
    """Print the generated sitemap XML."""

    async def run():
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(f"{api_url}/sitemap.xml")
            response.raise_for_status()
            return response.text

    try:
        xml = asyncio.run(run())
    except httpx.HTTPError as e:
        console.print(f"[red]Error fetching sitemap: {e}[/red]")
        raise typer.Exit(1)
    console.print(Syntax(xml, "xml"))


if __name__ == "__main__":
    app()
