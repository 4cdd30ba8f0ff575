"""Generation statistics fragments for each export format.

All layouts carry the same six fields in the same order with the same
precision: tokens/sec to 2 places, timings to 3 places, counters as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.schemas.export import ExportFormat
from app.services.export.fallbacks import count, fixed

if TYPE_CHECKING:
    from app.schemas.conversation import GenerationStats

MARKDOWN_LABELS = (
    "Tokens per second",
    "Time to first token",
    "Total time",
    "Prompt tokens",
    "Generated tokens",
    "Total tokens",
)
TEXT_LABELS = (
    "Tokens/sec",
    "Time to first token",
    "Total time",
    "Prompt tokens",
    "Generated tokens",
    "Total tokens",
)
COMPACT_LABELS = (
    "Tokens/sec",
    "First token",
    "Total time",
    "Prompt tokens",
    "Generated",
    "Total",
)


def _seconds(value: float | None) -> str:
    # Unit only follows a real value, never the N/A placeholder
    rendered = fixed(value, 3)
    return rendered if value is None else f"{rendered}s"


def stat_values(stats: GenerationStats) -> list[str]:
    """Return the six formatted values in display order."""
    return [
        fixed(stats.tokens_per_second, 2),
        _seconds(stats.time_to_first_token_sec),
        _seconds(stats.total_time_sec),
        count(stats.prompt_tokens_count),
        count(stats.predicted_tokens_count),
        count(stats.total_tokens_count),
    ]


def format_stats(stats: GenerationStats | None, target: ExportFormat) -> str:
    """Render a statistics fragment for ``target``.

    Args:
        stats: Statistics of one generation step (None renders nothing)
        target: Output format the fragment is embedded in

    Returns:
        The fragment, or an empty string when ``stats`` is None
    """
    if stats is None:
        return ""

    values = stat_values(stats)

    if target == ExportFormat.MARKDOWN:
        lines = ["", "### Generation Statistics", ""]
        lines.extend(
            f"- **{label}:** {value}" for label, value in zip(MARKDOWN_LABELS, values)
        )
        return "\n".join(lines) + "\n\n"

    if target == ExportFormat.HTML:
        items = "\n".join(
            f"                    <div>{label}: {value}</div>"
            for label, value in zip(COMPACT_LABELS, values)
        )
        return (
            "\n            <div class=\"stats\">"
            "\n                <div class=\"stats-title\">Generation Statistics</div>"
            "\n                <div class=\"stats-grid\">"
            f"\n{items}"
            "\n                </div>"
            "\n            </div>"
        )

    if target == ExportFormat.PDF:
        return " | ".join(
            f"{label}: {value}" for label, value in zip(COMPACT_LABELS, values)
        )

    lines = ["Generation Stats:"]
    lines.extend(f"  {label}: {value}" for label, value in zip(TEXT_LABELS, values))
    return "\n".join(lines) + "\n\n"
