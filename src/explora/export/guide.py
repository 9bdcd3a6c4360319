"""Learning guide export.

A learning guide is the take-away of a conversation: every thread group in
order, the learner's confidence in each answer, pinned insights and the
highlights that started branches.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..config import truncate
from ..memory import ConfidenceLevel, Highlight, SessionNotes
from ..thread import Message, MessageRole, ThreadModel
from ..thread.models import utc_now

INSIGHT_MAX_LENGTH = 160

_ROLE_LABELS = {
    MessageRole.USER: "You",
    MessageRole.ASSISTANT: "Explora",
    MessageRole.SYSTEM: "System",
}

_CONFIDENCE_BADGES = {
    ConfidenceLevel.LOW: "confidence: low",
    ConfidenceLevel.MEDIUM: "confidence: medium",
    ConfidenceLevel.HIGH: "confidence: high",
}


class GuideEntry(BaseModel):
    """One message as it appears in the guide."""

    message: Message
    pinned: bool = False
    confidence: ConfidenceLevel | None = None


class GuideSection(BaseModel):
    """A thread group: the anchor entry and its replies."""

    anchor: GuideEntry
    replies: list[GuideEntry] = Field(default_factory=list)
    highlight: Highlight | None = Field(
        default=None,
        description="Highlight this section branched from, if any"
    )


class LearningGuide(BaseModel):
    title: str
    generated_at: datetime = Field(default_factory=utc_now)
    sections: list[GuideSection] = Field(default_factory=list)
    insights: list[GuideEntry] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)


def build_learning_guide(title: str, thread: ThreadModel, notes: SessionNotes) -> LearningGuide:
    """Assemble a guide from a thread and its annotations.

    Args:
        title: Guide title, usually the conversation title
        thread: Messages of the conversation
        notes: Pins, confidence tags and highlights

    Returns:
        LearningGuide with one section per thread group
    """
    branches = {h.branch_id: h for h in notes.highlights if h.branch_id}

    def entry(message: Message) -> GuideEntry:
        return GuideEntry(
            message=message,
            pinned=notes.is_pinned(message.id),
            confidence=notes.confidence.get(message.id),
        )

    sections = [
        GuideSection(
            anchor=entry(group.anchor),
            replies=[entry(reply) for reply in group.replies],
            highlight=branches.get(group.anchor.id),
        )
        for group in thread.group()
    ]
    insights = [entry(thread.get(mid)) for mid in notes.pinned if mid in thread]

    return LearningGuide(
        title=title,
        sections=sections,
        insights=insights,
        highlights=list(notes.highlights),
    )


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.splitlines())


def _entry_markdown(entry: GuideEntry) -> str:
    label = _ROLE_LABELS[entry.message.role]
    badges = []
    if entry.pinned:
        badges.append("pinned")
    if entry.confidence is not None:
        badges.append(_CONFIDENCE_BADGES[entry.confidence])
    suffix = f" _({', '.join(badges)})_" if badges else ""
    return f"**{label}**{suffix}\n\n{entry.message.content.strip()}"


def render_markdown(guide: LearningGuide) -> str:
    """Render a guide as Markdown.

    Replies are shown as block quotes under their anchor so the branch
    structure survives in plain text.
    """
    lines = [
        f"# {guide.title}",
        "",
        f"_Generated {guide.generated_at.strftime('%Y-%m-%d %H:%M UTC')}_",
        "",
    ]

    if guide.insights:
        lines += ["## Key insights", ""]
        lines += [f"- {truncate(i.message.content, INSIGHT_MAX_LENGTH)}" for i in guide.insights]
        lines.append("")

    lines += ["## Conversation", ""]
    for number, section in enumerate(guide.sections, 1):
        heading = f"### {number}."
        if section.highlight is not None:
            heading += f' Branch: "{section.highlight.text.strip()}"'
        lines += [heading, "", _entry_markdown(section.anchor), ""]
        for reply in section.replies:
            lines += [_quote(_entry_markdown(reply)), ""]

    if guide.highlights:
        lines += ["## Highlights", ""]
        lines += [f'- "{h.text.strip()}"' for h in guide.highlights]
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def render_json(guide: LearningGuide, indent: int = 2) -> str:
    """Render a guide as JSON (message parent ids use the ``parentId`` key)."""
    return guide.model_dump_json(indent=indent, by_alias=True)
