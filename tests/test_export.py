"""Tests for learning guide export."""
import json

import pytest

from explora.export import build_learning_guide, render_guide, render_markdown
from explora.memory import ConfidenceLevel, Highlight, SessionNotes
from explora.thread import ThreadModel

from .conftest import make_message


@pytest.fixture
def thread():
    return ThreadModel.from_messages([
        make_message("1", "user", "What is inflation?"),
        make_message("2", "assistant", "Inflation is a general rise in prices."),
        make_message("3", "user", "tell me more", parent_id="1"),
        make_message("4", "user", 'Let\'s explore this part in more depth: "general rise"'),
        make_message("5", "assistant", "It affects most goods at once.", parent_id="4"),
    ])


@pytest.fixture
def notes():
    return SessionNotes(
        pinned=["5", "2"],
        confidence={"2": ConfidenceLevel.MEDIUM},
        highlights=[
            Highlight(message_id="2", text="general rise", start_index=15, end_index=27, branch_id="4"),
        ],
    )


class TestBuildLearningGuide:
    """Tests for assembling a guide."""

    def test_sections_follow_groups(self, thread, notes):
        """Test that each thread group becomes a section, in order."""
        guide = build_learning_guide("Inflation", thread, notes)

        assert [s.anchor.message.id for s in guide.sections] == ["1", "2", "4"]
        assert [r.message.id for r in guide.sections[0].replies] == ["3"]
        assert [r.message.id for r in guide.sections[2].replies] == ["5"]

    def test_annotations_are_attached(self, thread, notes):
        """Test that pins, confidence and branch highlights are attached."""
        guide = build_learning_guide("Inflation", thread, notes)

        answer = guide.sections[1].anchor
        assert answer.pinned
        assert answer.confidence == ConfidenceLevel.MEDIUM
        assert guide.sections[2].highlight.text == "general rise"
        assert guide.sections[0].highlight is None
        assert [i.message.id for i in guide.insights] == ["5", "2"]

    def test_pins_for_unknown_messages_are_skipped(self, thread):
        """Test that stale pinned ids do not break the guide."""
        guide = build_learning_guide("t", thread, SessionNotes(pinned=["gone", "2"]))

        assert [i.message.id for i in guide.insights] == ["2"]

    def test_empty_thread(self):
        """Test a guide for an empty conversation."""
        guide = build_learning_guide("Empty", ThreadModel(), SessionNotes())

        assert guide.sections == []
        assert "# Empty" in render_markdown(guide)


class TestRenderers:
    """Tests for Markdown and JSON output."""

    def test_markdown(self, thread, notes):
        """Test the Markdown layout."""
        text = render_markdown(build_learning_guide("Inflation", thread, notes))

        assert text.startswith("# Inflation\n")
        assert "## Key insights" in text
        assert "- It affects most goods at once." in text
        assert "### 1." in text
        assert '### 3. Branch: "general rise"' in text
        assert "> **You**" in text
        assert "_(pinned, confidence: medium)_" in text
        assert text.index("What is inflation?") < text.index("tell me more")

    def test_json(self, thread, notes):
        """Test that JSON output uses parentId for replies."""
        data = json.loads(render_guide(build_learning_guide("Inflation", thread, notes), "json"))

        assert data["title"] == "Inflation"
        reply = data["sections"][0]["replies"][0]["message"]
        assert reply["parentId"] == "1"
        assert data["sections"][1]["anchor"]["confidence"] == "medium"

    def test_unknown_format(self, thread, notes):
        """Test that an unknown export format raises."""
        with pytest.raises(ValueError, match="Unsupported export format"):
            render_guide(build_learning_guide("t", thread, notes), "pdf")
