"""Tests for the conversational orchestrator.

Verifies that:
1. Retrieved passages ground the system prompt and are returned as sources
2. Retrieval failure degrades to an ungrounded reply
3. Model failure propagates
4. Drafts are never marked as safety-filtered
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from retire_strong.coach.orchestrator import MAX_TOKENS, TEMPERATURE, ChatOrchestrator
from retire_strong.coach.prompt_builder import RAG_SECTION_HEADER
from retire_strong.coach.schemas import CoachMessage
from retire_strong.core.errors import LanguageModelError, RetrievalError
from retire_strong.planning.planner import build_starter_plan
from retire_strong.rag.types import RetrievedPassage

LONG_GUIDELINE = "Older adults should include balance training on three or more days a week. " * 5


def _retrieval(passages=None, error: Exception | None = None) -> MagicMock:
    retrieval = MagicMock()
    retrieval.search = AsyncMock(return_value=passages or [], side_effect=error)
    return retrieval


def _passage(title: str, score: float, content: str = "Short passage.") -> RetrievedPassage:
    return RetrievedPassage(content=content, source_title=title, collection="clinical_guidelines", score=score)


class TestChat:
    @pytest.mark.asyncio
    async def test_grounded_reply(self, make_llm, coach_context):
        llm = make_llm("Balance work keeps you steady on stairs.")
        retrieval = _retrieval([_passage("WHO Guidelines", 0.91, LONG_GUIDELINE)])
        orchestrator = ChatOrchestrator(llm, retrieval)

        draft = await orchestrator.chat("Why do balance exercises matter?", coach_context)

        assert draft.message == "Balance work keeps you steady on stairs."
        assert draft.safety_filtered is False
        assert draft.model == "gpt-4o-mini"
        assert (draft.input_tokens, draft.output_tokens) == (120, 80)
        assert len(draft.sources) == 1
        source = draft.sources[0]
        assert source.title == "WHO Guidelines"
        assert source.excerpt == LONG_GUIDELINE[:200] + "..."

        query = retrieval.search.call_args.args[0]
        assert query.query == "Why do balance exercises matter?"
        assert query.limit == 3
        assert query.min_similarity == 0.6

        system_prompt, messages = llm.converse.call_args.args
        assert RAG_SECTION_HEADER in system_prompt
        assert "## Source 1 (clinical_guidelines)" in system_prompt
        assert messages[-1] == CoachMessage(role="user", content="Why do balance exercises matter?")
        assert llm.converse.call_args.kwargs == {"max_tokens": MAX_TOKENS, "temperature": TEMPERATURE}
        assert draft.system_prompt == system_prompt

    @pytest.mark.asyncio
    async def test_sources_capped_at_top_k(self, make_llm, coach_context):
        passages = [_passage(f"Doc {i}", 0.9 - i * 0.01) for i in range(5)]
        orchestrator = ChatOrchestrator(make_llm("ok"), _retrieval(passages), top_k=2)
        draft = await orchestrator.chat("hello", coach_context)
        assert [s.title for s in draft.sources] == ["Doc 0", "Doc 1"]

    @pytest.mark.asyncio
    async def test_retrieval_failure_degrades_gracefully(self, make_llm, coach_context):
        llm = make_llm("Here's a general tip.")
        orchestrator = ChatOrchestrator(llm, _retrieval(error=RetrievalError("index offline")))

        draft = await orchestrator.chat("Tips for my knees?", coach_context)

        assert draft.message == "Here's a general tip."
        assert draft.sources == []
        assert RAG_SECTION_HEADER not in llm.converse.call_args.args[0]

    @pytest.mark.asyncio
    async def test_rag_can_be_disabled(self, make_llm, coach_context):
        retrieval = _retrieval([_passage("Unused", 0.99)])
        draft = await ChatOrchestrator(make_llm("ok"), retrieval).chat("hi", coach_context, use_rag=False)
        retrieval.search.assert_not_called()
        assert draft.sources == []

    @pytest.mark.asyncio
    async def test_model_failure_propagates(self, coach_context, null_retrieval):
        llm = MagicMock()
        llm.converse = AsyncMock(side_effect=LanguageModelError("gpt-4o-mini", "timeout"))
        with pytest.raises(LanguageModelError):
            await ChatOrchestrator(llm, null_retrieval).chat("hi", coach_context)

    @pytest.mark.asyncio
    async def test_history_is_forwarded_without_system_messages(self, make_llm, coach_context, null_retrieval):
        context = coach_context.model_copy(
            update={
                "conversation_history": [
                    CoachMessage(role="system", content="stale instructions"),
                    CoachMessage(role="user", content="I walked today"),
                    CoachMessage(role="assistant", content="Wonderful!"),
                ]
            }
        )
        llm = make_llm("ok")
        await ChatOrchestrator(llm, null_retrieval).chat("What next?", context)

        messages = llm.converse.call_args.args[1]
        assert [m.role for m in messages] == ["user", "assistant", "user"]
        assert messages[-1].content == "What next?"


class TestExplainPlan:
    @pytest.mark.asyncio
    async def test_plan_text_is_sent_as_user_turn(self, make_llm, coach_context, healthy_profile, catalog, start_date):
        plan = build_starter_plan(healthy_profile, catalog=catalog, today=start_date)
        llm = make_llm("Your plan builds leg strength for stairs.")

        draft = await ChatOrchestrator(llm, _retrieval()).explain_plan(plan, coach_context)

        user_turn = llm.converse.call_args.args[1][-1].content
        assert user_turn.startswith("Please explain this exercise plan")
        assert "Plan:\nDay 1: Strength + Balance (2024-11-04, pending)" in user_turn
        assert draft.message == "Your plan builds leg strength for stairs."
