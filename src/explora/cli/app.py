"""Main CLI application using Typer."""
import asyncio
import os
import shlex
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from ..chat import ChatSession
from ..config import DEFAULT_LLM_PROVIDER, ENV_LLM_PROVIDER, LIST_DEFAULT_LIMIT, env_log_level
from ..export import EXPORT_FORMATS, build_learning_guide, render_guide
from ..thread import ThreadError
from .providers import configure_logging, get_llm, get_memory
from .render import (
    conversations_table,
    message_panel,
    resolve_message_id,
    short_id,
    thread_tree,
)

load_dotenv()

app = typer.Typer(
    name="explora",
    help="Conversational learning: chat, branch from highlights, pin insights, export guides",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()

CHAT_HELP = """\
[bold]Commands[/bold]
  /reply ID                reply in the thread of message ID
  /cancel                  stop replying, go back to the main thread
  /branch ID START END     branch from characters START..END of message ID
  /pin ID, /unpin ID       pin or unpin an insight
  /confidence ID LEVEL     tag confidence: low, medium or high
  /show                    show the conversation as threads
  /export PATH             write a Markdown learning guide
  /help                    show this help
  /quit                    leave the chat
IDs can be shortened to the 8 characters shown in brackets."""


@app.callback()
def main(
    log_level: str = typer.Option(
        env_log_level(),
        "--log-level",
        help="Logging level: DEBUG, INFO, WARNING or ERROR"
    )
):
    """Explora command line."""
    configure_logging(log_level)


async def run_command(session: ChatSession, line: str, out: Console) -> bool:
    """Execute one slash command. Returns False when the chat should end."""
    name, *args = shlex.split(line)
    thread = session.thread

    def need(count: int) -> None:
        if len(args) != count:
            raise ValueError(f"{name} expects {count} argument(s)")

    if name in ("/quit", "/exit"):
        return False

    if name == "/help":
        out.print(CHAT_HELP)
    elif name == "/reply":
        need(1)
        anchor_id = session.start_reply(resolve_message_id(thread, args[0]))
        out.print(f"[dim]Replying to {anchor_id}. /cancel to stop.[/dim]")
    elif name == "/cancel":
        session.cancel_reply()
        out.print("[dim]Back to the main thread.[/dim]")
    elif name == "/branch":
        need(3)
        message_id = resolve_message_id(thread, args[0])
        with out.status("[dim]Exploring highlight...[/dim]"):
            highlight = await session.branch_from_highlight(message_id, int(args[1]), int(args[2]))
        for message in thread.messages[-2:]:
            out.print(message_panel(message, message.parent_id))
        out.print(f'[dim]Branched on "{highlight.text}". Follow-ups continue in this branch.[/dim]')
    elif name in ("/pin", "/unpin"):
        need(1)
        message_id = resolve_message_id(thread, args[0])
        if name == "/pin":
            session.pin(message_id)
        else:
            session.unpin(message_id)
        await session.save_notes()
        out.print(f"[green]{name[1:].capitalize()}ned {message_id}[/green]")
    elif name == "/confidence":
        need(2)
        level = session.tag_confidence(resolve_message_id(thread, args[0]), args[1].lower())
        await session.save_notes()
        out.print(f"[green]Confidence set to {level.value}[/green]")
    elif name == "/show":
        title = session.conversation.title if session.conversation else "Conversation"
        out.print(thread_tree(title, session.groups(), session.notes))
    elif name == "/export":
        need(1)
        title = session.conversation.title if session.conversation else "Learning guide"
        guide = build_learning_guide(title, thread, session.notes)
        Path(args[0]).write_text(render_guide(guide, "markdown"), encoding="utf-8")
        out.print(f"[green]Learning guide written to {args[0]}[/green]")
    else:
        out.print(f"[yellow]Unknown command {name}. Type /help.[/yellow]")
    return True


@app.command()
def chat(
    conversation: str | None = typer.Option(
        None,
        "--conversation",
        "-c",
        help="Resume a stored conversation by ID"
    ),
    title: str | None = typer.Option(
        None,
        "--title",
        "-t",
        help="Title for a new conversation"
    )
):
    """Interactive learning chat."""
    async def _chat():
        memory = get_memory()
        llm = get_llm(console)

        try:
            await memory.connect()
            session = await ChatSession.open(memory, llm, conversation_id=conversation, title=title)

            console.print(f"[bold]{session.conversation.title}[/bold] [dim]({session.conversation.id})[/dim]")
            console.print("[dim]Type /help for commands.[/dim]\n")
            if len(session.thread):
                console.print(thread_tree(session.conversation.title, session.groups(), session.notes))

            while True:
                prompt = "[bold cyan]you[/bold cyan]"
                if session.replying_to:
                    prompt += f" [dim](reply {short_id(session.replying_to)})[/dim]"
                try:
                    line = console.input(f"{prompt}> ").strip()
                except (EOFError, KeyboardInterrupt):
                    break

                if not line:
                    continue

                if line.startswith("/"):
                    try:
                        if not await run_command(session, line, console):
                            break
                    except (ThreadError, ValueError, OSError) as e:
                        console.print(f"[red]Error: {e}[/red]")
                    continue

                with console.status("[dim]Thinking...[/dim]"):
                    _, answer = await session.send_message(line)
                console.print(message_panel(answer, answer.parent_id))

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await memory.disconnect()
            await llm.close()

    asyncio.run(_chat())


@app.command()
def conversations(
    limit: int = typer.Option(
        LIST_DEFAULT_LIMIT,
        "--limit",
        "-l",
        help="Maximum number of conversations"
    )
):
    """List stored conversations, most recent first."""
    async def _list():
        memory = get_memory()
        try:
            await memory.connect()
            items = await memory.list_conversations(limit)
            if not items:
                console.print("[yellow]No conversations yet. Start one with: explora chat[/yellow]")
                return
            console.print(conversations_table(items))
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await memory.disconnect()

    asyncio.run(_list())


@app.command()
def show(
    conversation_id: str = typer.Argument(..., help="Conversation ID")
):
    """Show a conversation grouped into threads."""
    async def _show():
        memory = get_memory()
        try:
            await memory.connect()
            stored = await memory.require_conversation(conversation_id)
            thread = await memory.load_thread(conversation_id)
            notes = await memory.get_notes(conversation_id)

            console.print(thread_tree(stored.title, thread.group(), notes))
            orphans = thread.orphans()
            if orphans:
                console.print(f"[yellow]{len(orphans)} reply(ies) shown as new threads: parent not found[/yellow]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await memory.disconnect()

    asyncio.run(_show())


@app.command()
def export(
    conversation_id: str = typer.Argument(..., help="Conversation ID"),
    fmt: str = typer.Option(
        "markdown",
        "--format",
        "-f",
        help=f"Output format: {', '.join(EXPORT_FORMATS)}"
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write to this file instead of stdout"
    )
):
    """Export a conversation as a learning guide."""
    async def _export():
        memory = get_memory()
        try:
            await memory.connect()
            stored = await memory.require_conversation(conversation_id)
            guide = build_learning_guide(
                stored.title,
                await memory.load_thread(conversation_id),
                await memory.get_notes(conversation_id),
            )
            rendered = render_guide(guide, fmt)

            if output is None:
                typer.echo(rendered)
            else:
                output.write_text(rendered, encoding="utf-8")
                console.print(f"[green]Learning guide written to {output}[/green]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await memory.disconnect()

    asyncio.run(_export())


@app.command()
def health():
    """Check the memory backend and API keys."""
    async def _health():
        all_healthy = True

        memory = get_memory()
        try:
            await memory.connect()
            console.print(f"[green]+[/green] Memory backend ({memory.backend_type}): OK")
        except Exception as e:
            console.print(f"[red]x[/red] Memory backend: FAILED ({e})")
            all_healthy = False
        finally:
            await memory.disconnect()

        provider = os.getenv(ENV_LLM_PROVIDER, DEFAULT_LLM_PROVIDER)
        console.print(f"[dim]LLM provider: {provider}[/dim]")
        for key in ("OPENAI_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
            if os.getenv(key):
                console.print(f"[green]+[/green] {key}: SET")
            else:
                console.print(f"[yellow]![/yellow] {key}: NOT SET")

        if not all_healthy:
            raise typer.Exit(code=1)

    asyncio.run(_health())


if __name__ == "__main__":
    app()
