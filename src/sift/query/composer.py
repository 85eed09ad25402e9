"""Turn ranked results into an explained answer.

Two composers share one interface:

- ``TemplateComposer`` picks a fixed template by primary intent and fills
  in pure aggregations over the results.  Always succeeds.
- ``LLMEnrichedComposer`` wraps a template composer and asks Claude to
  rewrite the message.  Any generation failure leaves the template
  response untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol

from sift.content.models import UrgencyLevel, Velocity
from sift.errors import ProviderUnavailable
from sift.llm import LLMError, call_claude, resolve_model
from sift.query import insights
from sift.query.models import (
    ComposedResponse,
    Intent,
    QueryAnalysis,
    ResponseInsights,
    ResponseType,
)
from sift.query.prompts import get_response_system_prompt, get_response_user_prompt
from sift.vectors.models import RankedResult

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "I couldn't find any content matching your query. "
    "Try rephrasing or using different keywords."
)

# Results above this importance count as trending in the trend template
_TRENDING_IMPORTANCE = 4.0
# Templates list at most this many items
_MAX_ITEMS = 5

GenerateFn = Callable[..., str]


class ResponseComposer(Protocol):
    def compose(
        self,
        query: str,
        analysis: QueryAnalysis,
        results: Sequence[RankedResult],
        now: datetime | None = None,
    ) -> ComposedResponse: ...


def no_results_suggestions(analysis: QueryAnalysis) -> list[str]:
    suggestions: list[str] = []
    if analysis.intents.temporal:
        suggestions.append('Try: "what did I work on this week?"')
    if analysis.intents.urgency:
        suggestions.append('Try: "show me important items"')
    suggestions.append('Try: "what am I thinking about lately?"')
    suggestions.append('Try: "show me trending topics"')
    return suggestions


def urgency_recommendations(urgent: Sequence[RankedResult]) -> list[str]:
    if not urgent:
        return ["Nothing is marked urgent right now."]
    recommendations = [f"Review {len(urgent)} high-priority item(s) soon."]
    if any(r.metadata.submission_count > 2 for r in urgent):
        recommendations.append("Some of these were saved repeatedly; they may need follow-up.")
    if any(r.metadata.velocity == Velocity.HIGH for r in urgent):
        recommendations.append("Several items came in within the last day.")
    return recommendations


class TemplateComposer:
    """Deterministic, template-based responses per query intent."""

    def compose(
        self,
        query: str,
        analysis: QueryAnalysis,
        results: Sequence[RankedResult],
        now: datetime | None = None,
    ) -> ComposedResponse:
        if not results:
            return ComposedResponse(
                type=ResponseType.NO_RESULTS,
                message=NO_RESULTS_MESSAGE,
                suggestions=no_results_suggestions(analysis),
            )

        intent = analysis.primary_intent
        if intent == Intent.TEMPORAL:
            return self._temporal(analysis, results)
        if intent == Intent.TREND:
            return self._trend(results)
        if intent == Intent.URGENCY:
            return self._urgency(results)
        if intent == Intent.ANALYTICAL:
            return self._analytical(results, now)
        return self._semantic(results)

    def _temporal(
        self, analysis: QueryAnalysis, results: Sequence[RankedResult]
    ) -> ComposedResponse:
        if analysis.time_context is None:
            message = "Here's what you've been focusing on lately:"
            timeframe = "recent"
        else:
            timeframe = analysis.time_context.value.replace("_", " ")
            message = f"Here's what you've been working on {timeframe}:"
        return ComposedResponse(
            type=ResponseType.TEMPORAL,
            message=message,
            items=list(results[:_MAX_ITEMS]),
            insights=ResponseInsights(
                total_items=len(results),
                high_importance=insights.count_high_importance(results),
                trending_topics=insights.trending_topics(results),
                timeframe=timeframe,
            ),
        )

    def _trend(self, results: Sequence[RankedResult]) -> ComposedResponse:
        trending = [
            r
            for r in results
            if r.metadata.velocity == Velocity.HIGH
            or r.metadata.importance_score > _TRENDING_IMPORTANCE
        ]
        return ComposedResponse(
            type=ResponseType.TREND,
            message="Here are the topics you've been thinking about most:",
            items=(trending or list(results))[:_MAX_ITEMS],
            insights=ResponseInsights(
                total_trending=len(trending),
                average_importance=insights.average_importance(results),
                top_keywords=insights.top_keywords(results),
            ),
        )

    def _urgency(self, results: Sequence[RankedResult]) -> ComposedResponse:
        urgent = [r for r in results if r.metadata.urgency_level == UrgencyLevel.HIGH]
        return ComposedResponse(
            type=ResponseType.URGENCY,
            message="Here are your high-priority items:",
            items=urgent,
            insights=ResponseInsights(
                total_urgent=len(urgent),
                needs_attention=bool(urgent),
                recommendations=urgency_recommendations(urgent),
            ),
        )

    def _analytical(
        self, results: Sequence[RankedResult], now: datetime | None
    ) -> ComposedResponse:
        return ComposedResponse(
            type=ResponseType.ANALYTICAL,
            message="Here's an analysis of your content:",
            items=list(results[:3]),
            insights=ResponseInsights(
                total_items=len(results),
                average_importance=insights.average_importance(results),
                content_breakdown=insights.content_breakdown(results),
                importance_distribution=insights.importance_distribution(results),
                temporal_patterns=insights.temporal_patterns(results, now),
                top_sources=insights.top_sources(results),
            ),
        )

    def _semantic(self, results: Sequence[RankedResult]) -> ComposedResponse:
        return ComposedResponse(
            type=ResponseType.SEMANTIC,
            message=f"Found {len(results)} items related to your query:",
            items=list(results[:_MAX_ITEMS]),
            insights=ResponseInsights(
                best_match_id=results[0].id,
                average_relevance=insights.average_relevance(results),
                related_topics=insights.related_topics(results),
                urgent_items=insights.count_urgent(results),
            ),
        )


class LLMEnrichedComposer:
    """Decorates a composer with an LLM-written message.

    Args:
        template: Composer producing the base response.
        generate: ``generate(system_prompt, user_prompt, **kwargs) -> str``.
            Defaults to :func:`sift.llm.call_claude`.
        model: Model name passed to *generate*.
        timeout: Seconds passed to *generate*.
    """

    def __init__(
        self,
        template: ResponseComposer | None = None,
        generate: GenerateFn = call_claude,
        model: str | None = None,
        timeout: int = 60,
    ) -> None:
        self._template = template or TemplateComposer()
        self._generate = generate
        self._model = model
        self._timeout = timeout

    def compose(
        self,
        query: str,
        analysis: QueryAnalysis,
        results: Sequence[RankedResult],
        now: datetime | None = None,
    ) -> ComposedResponse:
        response = self._template.compose(query, analysis, results, now)
        if not results:
            return response

        try:
            message = self._generate(
                get_response_system_prompt(),
                get_response_user_prompt(query, analysis, results, draft=response.message),
                model=self._model,
                timeout=self._timeout,
                label="query-response",
            )
        except (LLMError, ProviderUnavailable) as exc:
            logger.warning("LLM enrichment failed, using template response: %s", exc)
            return response

        if not message.strip():
            logger.warning("LLM enrichment returned empty text, using template response")
            return response

        return response.model_copy(
            update={
                "message": message.strip(),
                "enhanced": True,
                "model": resolve_model(self._model),
            }
        )


def compose_response(
    query: str,
    analysis: QueryAnalysis,
    results: Sequence[RankedResult],
    now: datetime | None = None,
) -> ComposedResponse:
    """Template response for *results*; see :class:`TemplateComposer`."""
    return TemplateComposer().compose(query, analysis, results, now)
