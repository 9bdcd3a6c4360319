"""Rich renderables for threads and conversations."""

from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..config import truncate
from ..memory import Conversation, SessionNotes
from ..thread import Message, MessageRole, ThreadGroup, ThreadModel, UnknownMessageError

SHORT_ID_LENGTH = 8

_ROLE_STYLES = {
    MessageRole.USER: "bold cyan",
    MessageRole.ASSISTANT: "bold green",
    MessageRole.SYSTEM: "bold magenta",
}


def short_id(message_id: str) -> str:
    """Trailing characters of an id; the leading uuid7 bits are a timestamp."""
    return message_id[-SHORT_ID_LENGTH:]


def resolve_message_id(thread: ThreadModel, ref: str) -> str:
    """Resolve a full id or a unique short id to a message id.

    Raises:
        UnknownMessageError: If nothing matches or the reference is ambiguous
    """
    if ref in thread:
        return ref
    matches = [m.id for m in thread if m.id.endswith(ref) or m.id.startswith(ref)]
    if len(matches) != 1:
        raise UnknownMessageError(ref)
    return matches[0]


def message_label(message: Message, notes: SessionNotes | None = None) -> Text:
    """One-line summary: short id, role, badges and a content preview."""
    label = Text()
    label.append(f"[{short_id(message.id)}] ", style="dim")
    label.append(message.role.value, style=_ROLE_STYLES[message.role])
    if notes is not None:
        if notes.is_pinned(message.id):
            label.append(" *pinned*", style="yellow")
        level = notes.confidence.get(message.id)
        if level is not None:
            label.append(f" ({level.value} confidence)", style="magenta")
    label.append(f"  {truncate(message.content)}")
    return label


def thread_tree(title: str, groups: list[ThreadGroup], notes: SessionNotes | None = None) -> Tree:
    """Anchors as branches of the root, replies nested one level below."""
    tree = Tree(Text(title, style="bold"))
    for group in groups:
        node = tree.add(message_label(group.anchor, notes))
        for reply in group.replies:
            node.add(message_label(reply, notes))
    return tree


def message_panel(message: Message, replying_to: str | None = None) -> Panel:
    subtitle = f"reply to {short_id(replying_to)}" if replying_to else None
    return Panel(
        Markdown(message.content),
        title=f"{message.role.value} [{short_id(message.id)}]",
        title_align="left",
        subtitle=subtitle,
        border_style=_ROLE_STYLES[message.role].split()[-1],
    )


def conversations_table(conversations: list[Conversation]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Messages", justify="right", width=8)
    table.add_column("Updated", style="green")

    for conversation in conversations:
        table.add_row(
            conversation.id,
            truncate(conversation.title, 50),
            str(conversation.message_count),
            conversation.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table
