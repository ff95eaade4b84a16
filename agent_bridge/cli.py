import asyncio
import json
import logging
from typing import List, Optional

import typer
from typing_extensions import Annotated
from rich.console import Console
from rich.prompt import Prompt

from agent_bridge.client.agent_bridge import AgentBridge
from agent_bridge.domains.manifest import Manifest
from agent_bridge.domains.tools import ActionResult, ToolCall
from agent_bridge.errors import AgentBridgeError
from agent_bridge.manifests.discovery import discover_from_domain, generate_well_known_file
from agent_bridge.protocol.server import ProtocolServer

# --- Basic Logging Configuration ---
logging.basicConfig(level=logging.WARNING, format="%(levelname)s:%(name)s:%(message)s")
# --- End Logging Configuration ---

app = typer.Typer()
console = Console()


def show_tool_call(tool_call: ToolCall) -> None:
    console.print(f"[dim]-> {tool_call.qualified_name} {json.dumps(tool_call.parameters)}[/dim]")


def show_tool_result(name: str, result: ActionResult) -> None:
    color = "green" if result.success else "red"
    console.print(f"[dim {color}]<- {name}: {result.message}[/dim {color}]")


async def ask_in_terminal(question: str) -> str:
    return Prompt.ask(f"[bright_blue]Agent asks:[/bright_blue] {question}")


async def run_chat(agent: AgentBridge) -> None:
    """Interactive loop; one event loop for the whole session."""
    session_id = await agent.create_session()
    try:
        while True:
            try:
                user_message = Prompt.ask("[bold green]You[/bold green]")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[yellow]Exiting chat session.[/yellow]")
                break

            if user_message.lower() in ["exit", "quit"]:
                console.print("[yellow]Exiting chat session.[/yellow]")
                break
            if not user_message.strip():
                continue

            try:
                with console.status("[bold green]Thinking...", spinner="dots"):
                    reply = await agent.chat(
                        session_id,
                        user_message,
                        ask_user=ask_in_terminal,
                        on_tool_call=show_tool_call,
                        on_tool_result=show_tool_result,
                    )
            except AgentBridgeError as e:
                console.print(f"[bold red]Error during processing:[/bold red] {e}")
                continue
            console.print(f"[bright_blue]Agent:[/bright_blue] {reply}")
    finally:
        await agent.close()


@app.command()
def chat(
    config: Annotated[
        str, typer.Option(help="Path to the configuration JSON file.")
    ] = "config.json",
):
    """
    Start an interactive chat session.
    Type 'exit' or 'quit' to end the session.
    """
    try:
        with console.status("[bold green]Initializing agent...", spinner="dots"):
            agent = AgentBridge(config_path=config)
    except FileNotFoundError:
        console.print(
            f"[bold red]Error:[/bold red] Configuration file not found at '{config}'"
        )
        raise typer.Exit(code=1)
    except (ValueError, AgentBridgeError) as e:
        console.print(f"[bold red]Error loading configuration:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print("[green]Agent initialized. Start chatting![/green]")
    console.print("[dim]Type 'exit' or 'quit' to end.[/dim]")
    asyncio.run(run_chat(agent))


@app.command()
def serve(
    manifest: Annotated[
        List[str], typer.Option(help="Manifest JSON file; repeat for several APIs.")
    ],
    credentials: Annotated[
        Optional[str],
        typer.Option(help="JSON file mapping manifest names to credential records."),
    ] = None,
):
    """
    Serve manifest actions as MCP tools over stdio.
    """
    try:
        manifests = [Manifest.load_file(path) for path in manifest]
        creds = {}
        if credentials:
            with open(credentials, "r") as f:
                creds = json.load(f)
    except (OSError, ValueError, AgentBridgeError) as e:
        # stdout belongs to the protocol
        Console(stderr=True).print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    asyncio.run(ProtocolServer(manifests, credentials=creds).run_stdio())


@app.command()
def discover(
    domain: Annotated[str, typer.Argument(help="Domain or base URL to check.")],
):
    """
    Print the manifest a domain publishes at its well-known path.
    """
    with console.status(f"[bold green]Checking {domain}...", spinner="dots"):
        manifest = asyncio.run(discover_from_domain(domain))
    if manifest is None:
        console.print(f"[yellow]No agent manifest found for {domain}.[/yellow]")
        raise typer.Exit(code=1)
    console.print_json(generate_well_known_file(manifest))


if __name__ == "__main__":
    app()
