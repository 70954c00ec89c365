"""Conflict coach sessions and sentiment analyses.

Sentiment analysis sends the last five chat messages to Gemini.  Without an
API key, or when the call or the JSON parse fails, a neutral canned analysis
is returned instead so callers always get a usable result.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

import httpx
from sqlalchemy.exc import SQLAlchemyError

from harmony.core.errors import ConfigurationError, NotFoundError
from harmony.models.chat import ChatMessage
from harmony.models.conflict import ConflictAnalysis, ConflictCoachSession
from harmony.repositories.store import SqlStore
from harmony.schemas.conflict import ConflictSessionUpdate, SentimentAnalysis
from harmony.services.base import EntityService, write_guard
from harmony.services.gemini import GeminiClient

logger = logging.getLogger(__name__)

ANALYSIS_WINDOW = 5

FALLBACK_ANALYSIS = SentimentAnalysis(
    sentiment="neutral",
    severity="low",
    topics=["general communication"],
    suggestions=[
        "Practice active listening and empathy",
        'Use "I" statements to express feelings',
        "Schedule a house meeting to discuss concerns",
    ],
)

FALLBACK_RESOLUTION = [
    "Schedule a house meeting to discuss the issue openly",
    'Use "I" statements to express your feelings',
    "Focus on finding solutions rather than assigning blame",
]

SENTIMENT_PROMPT = """\
You are an AI conflict resolution expert analyzing household communication. \
Analyze the following conversation between roommates and provide insights:

Conversation:
{conversation}

Respond only with valid JSON in this format:
{{"sentiment": "positive|neutral|negative", "severity": "low|medium|high", \
"topics": ["topic1"], "suggestions": ["suggestion1", "suggestion2", "suggestion3"]}}

Focus on the overall emotional tone, how serious the conflict is, the main topics \
(chores, finances, noise, space, scheduling, communication) and specific, \
actionable suggestions.
"""

RESOLUTION_PROMPT = """\
You are an AI conflict resolution coach helping {count} roommates resolve a {topic} conflict.
Context: {context}

Respond only with valid JSON in this format:
{{"suggestions": ["specific suggestion 1", "specific suggestion 2", "specific suggestion 3"]}}
"""


class ConflictService(EntityService[ConflictCoachSession]):
    model = ConflictCoachSession
    label = "conflict coach session"
    order_field = "started_at"

    def __init__(self, session, gemini: GeminiClient | None = None):
        super().__init__(session)
        self.analyses: SqlStore[ConflictAnalysis] = SqlStore(session, ConflictAnalysis)
        self.gemini = gemini or GeminiClient()

    # ─── Sessions ───────────────────────────────────────────────────────────

    async def update_session(self, session_id: str, payload: ConflictSessionUpdate) -> ConflictCoachSession:
        fields = payload.model_dump(exclude_unset=True)
        if fields.get("status") in ("completed", "cancelled"):
            fields["ended_at"] = datetime.now(timezone.utc)
        return await self.update(session_id, fields)

    async def active_sessions(self, household_id: str) -> Sequence[ConflictCoachSession]:
        return await self.list_for_household(
            household_id, filters=[ConflictCoachSession.status == "active"]
        )

    async def suggest_resolution(self, session_id: str, context: str) -> ConflictCoachSession:
        """Ask the coach for resolution steps and store them on the session."""
        coach_session = await self._require(session_id)
        suggestions = FALLBACK_RESOLUTION
        if self.gemini.available:
            try:
                reply = await self.gemini.generate_json(
                    RESOLUTION_PROMPT.format(
                        count=len(coach_session.participants), topic=coach_session.topic, context=context
                    ),
                    temperature=0.4,
                )
                suggestions = [str(s) for s in reply.get("suggestions") or []] or FALLBACK_RESOLUTION
            except (httpx.HTTPError, ValueError, KeyError) as e:
                logger.warning("Gemini resolution failed, using fallback: %s", e)
        return await self.update(session_id, {"suggestions": list(suggestions)})

    # ─── Analyses ───────────────────────────────────────────────────────────

    async def analyze_sentiment(self, messages: Sequence[ChatMessage]) -> SentimentAnalysis:
        if not self.gemini.available:
            return FALLBACK_ANALYSIS

        recent = list(messages)[-ANALYSIS_WINDOW:]
        conversation = "\n".join(m.content for m in recent)
        try:
            reply = await self.gemini.generate_json(SENTIMENT_PROMPT.format(conversation=conversation), 0.3)
            return SentimentAnalysis(
                sentiment=reply.get("sentiment") or "neutral",
                severity=reply.get("severity") or "low",
                topics=reply.get("topics") or ["general communication"],
                suggestions=reply.get("suggestions") or [],
            )
        except (httpx.HTTPError, ConfigurationError, ValueError, KeyError) as e:
            # pydantic's ValidationError is a ValueError
            logger.warning("Gemini sentiment analysis failed, using fallback: %s", e)
            return FALLBACK_ANALYSIS

    async def record_analysis(
        self,
        household_id: str,
        analysis: SentimentAnalysis,
        trigger_message_id: str | None = None,
    ) -> ConflictAnalysis:
        async with write_guard("create conflict analysis"):
            return await self.analyses.create(
                household_id=household_id,
                trigger_message_id=trigger_message_id,
                analysis=analysis.model_dump(),
            )

    async def analyze_household(self, household_id: str, messages: Sequence[ChatMessage]) -> ConflictAnalysis:
        """Analyze recent chat and store the result, triggered by the newest message."""
        analysis = await self.analyze_sentiment(messages)
        trigger = messages[-1].id if messages else None
        return await self.record_analysis(household_id, analysis, trigger)

    async def list_analyses(self, household_id: str, limit: int | None = None) -> Sequence[ConflictAnalysis]:
        try:
            return await self.analyses.list_for_household(
                household_id, order_by=ConflictAnalysis.created_at, limit=limit or 20
            )
        except SQLAlchemyError:
            logger.exception("Error fetching conflict analyses for household %s", household_id)
            return []

    async def resolve_analysis(self, analysis_id: str) -> ConflictAnalysis:
        async with write_guard("resolve conflict analysis"):
            analysis = await self.analyses.update(
                analysis_id, {"is_resolved": True, "resolved_at": datetime.now(timezone.utc)}
            )
        if analysis is None:
            raise NotFoundError("Conflict analysis not found")
        return analysis
