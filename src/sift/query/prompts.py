"""LLM prompts for response enrichment."""

from __future__ import annotations

from collections.abc import Sequence

from sift.query.models import QueryAnalysis
from sift.vectors.models import RankedResult

# Results and characters per result passed to the model
CONTEXT_RESULT_LIMIT = 10
CONTEXT_SNIPPET_CHARS = 300


def get_response_system_prompt() -> str:
    """Build the system prompt for answering a query over personal content."""
    return """You are a personal knowledge assistant. The user saves notes, links,
and files into a private library. Each saved item carries an importance
score (1-10) that rises when the user saves the same thing repeatedly,
and an urgency level.

## Task

Answer the user's question using ONLY the items provided. Lead with the
direct answer, then mention the most relevant items by what they say,
not by id.

## Style

- Plain prose, 2-4 short paragraphs. No headers.
- Be specific. Quote a phrase from an item when it helps.
- When items are urgent or were saved many times, say so.
- If the items do not answer the question, say that plainly instead of
  guessing.
"""


def format_result(index: int, result: RankedResult) -> str:
    meta = result.metadata
    snippet = result.document[:CONTEXT_SNIPPET_CHARS]
    lines = [
        f"### Item {index}",
        f"Type: {meta.type.value} | Importance: {meta.importance_score:.1f} | "
        f"Urgency: {meta.urgency_level.value} | Submissions: {meta.submission_count}",
    ]
    if meta.contextual_tags:
        lines.append(f"Tags: {', '.join(meta.contextual_tags)}")
    lines.append("")
    lines.append(snippet)
    return "\n".join(lines)


def get_response_user_prompt(
    query: str,
    analysis: QueryAnalysis,
    results: Sequence[RankedResult],
    draft: str = "",
) -> str:
    """Build the user prompt: the question, its intent, and the top results."""
    context = "\n\n".join(
        format_result(i, r) for i, r in enumerate(results[:CONTEXT_RESULT_LIMIT], start=1)
    )
    time_line = f"\nTime frame: {analysis.time_context.value}" if analysis.time_context else ""
    draft_section = f"\n\n## Draft Answer\n\n{draft}" if draft else ""
    return f"""## Question

{query}

Intent: {analysis.primary_intent.value}{time_line}

## Items

{context}{draft_section}
"""
