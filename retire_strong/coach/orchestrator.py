"""Conversational coaching orchestrator.

Produces draft replies grounded in retrieved reference content. The
orchestrator is never the safety authority: every draft it returns carries
safety_filtered=False and must be validated before display.

Failure handling:
- Retrieval failure: logged, the turn continues without grounding
- Model failure: propagated, since there is no safe content to return
"""

import time

from loguru import logger

from retire_strong.coach.llm_client import LanguageModelClient
from retire_strong.coach.prompt_builder import EXPLAIN_PLAN_TEMPLATE, build_rag_section, build_system_prompt
from retire_strong.coach.schemas import CoachContext, CoachDraft, CoachMessage, RagSource
from retire_strong.planning.models import MovementPlan
from retire_strong.planning.render import describe_plan
from retire_strong.rag.client import RetrievalClient
from retire_strong.rag.types import RetrievalQuery, RetrievedPassage

MAX_TOKENS = 1024
TEMPERATURE = 0.7
EXCERPT_CHARS = 200


def _excerpt(content: str) -> str:
    return content[:EXCERPT_CHARS] + "..."


class ChatOrchestrator:
    """Builds prompts, retrieves grounding and calls the language model."""

    def __init__(
        self,
        llm: LanguageModelClient,
        retrieval: RetrievalClient,
        top_k: int = 3,
        min_similarity: float = 0.6,
    ):
        self.llm = llm
        self.retrieval = retrieval
        self.top_k = top_k
        self.min_similarity = min_similarity

    async def _retrieve(self, user_message: str, user_id: str) -> list[RetrievedPassage]:
        query = RetrievalQuery(query=user_message, limit=self.top_k, min_similarity=self.min_similarity)
        try:
            passages = await self.retrieval.search(query)
        except Exception as e:
            logger.warning(
                "Retrieval failed, continuing without grounding",
                user_id=user_id,
                query=user_message[:100],
                error=str(e),
                exc_info=True,
            )
            return []
        return passages[: self.top_k]

    @staticmethod
    def _build_messages(history: list[CoachMessage], user_message: str) -> list[CoachMessage]:
        messages = [m for m in history if m.role != "system"]
        messages.append(CoachMessage(role="user", content=user_message))
        return messages

    async def chat(self, user_message: str, context: CoachContext, use_rag: bool = True) -> CoachDraft:
        """Produce a draft reply to one user message.

        Args:
            user_message: The user's message
            context: Per-request coaching context
            use_rag: Query the retrieval client for grounding

        Returns:
            CoachDraft with the model text verbatim and the sources used

        Raises:
            LanguageModelError: If the model call fails
        """
        passages = await self._retrieve(user_message, context.user_id) if use_rag else []

        system_prompt = build_system_prompt(context, build_rag_section(passages))
        messages = self._build_messages(context.conversation_history, user_message)

        start = time.perf_counter()
        reply = await self.llm.converse(
            system_prompt,
            messages,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
        )
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "Coach draft produced",
            user_id=context.user_id,
            model=reply.model,
            sources=len(passages),
            history_messages=len(messages) - 1,
            duration_ms=round(duration_ms, 1),
        )
        return CoachDraft(
            message=reply.text,
            sources=[
                RagSource(collection=p.collection, title=p.source_title, excerpt=_excerpt(p.content))
                for p in passages
            ],
            safety_filtered=False,
            model=reply.model,
            duration_ms=duration_ms,
            input_tokens=reply.input_tokens,
            output_tokens=reply.output_tokens,
            system_prompt=system_prompt,
        )

    async def explain_plan(self, plan: MovementPlan, context: CoachContext) -> CoachDraft:
        """Ask the model for an encouraging explanation of a plan."""
        user_message = EXPLAIN_PLAN_TEMPLATE.format(plan=describe_plan(plan))
        return await self.chat(user_message, context, use_rag=True)
