"""Learning guide export."""

from .guide import (
    GuideEntry,
    GuideSection,
    LearningGuide,
    build_learning_guide,
    render_json,
    render_markdown,
)

EXPORT_FORMATS = ("markdown", "json")


def render_guide(guide: LearningGuide, fmt: str = "markdown") -> str:
    """Render a guide in one of EXPORT_FORMATS.

    Raises:
        ValueError: If the format is not supported
    """
    if fmt == "markdown":
        return render_markdown(guide)
    if fmt == "json":
        return render_json(guide)
    raise ValueError(f"Unsupported export format: {fmt}. Supported formats: {', '.join(EXPORT_FORMATS)}")


__all__ = [
    "EXPORT_FORMATS",
    "GuideEntry",
    "GuideSection",
    "LearningGuide",
    "build_learning_guide",
    "render_guide",
    "render_json",
    "render_markdown",
]
