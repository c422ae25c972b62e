"""Language-model client for coaching replies.

This layer does not "think": it sends a system prompt and a message list to
the hosted model and returns the text. Decoding parameters are chosen by the
orchestrator. There are no retries here; a failed call is fatal to the turn.
"""

import time
from dataclasses import dataclass
from typing import Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from loguru import logger
from pydantic import SecretStr

from retire_strong.coach.schemas import CoachMessage
from retire_strong.core.errors import LanguageModelError


@dataclass(frozen=True)
class LlmReply:
    text: str
    model: str
    input_tokens: int | None = None
    output_tokens: int | None = None


class LanguageModelClient(Protocol):
    model: str

    async def converse(
        self,
        system_prompt: str,
        messages: list[CoachMessage],
        *,
        max_tokens: int,
        temperature: float,
    ) -> LlmReply: ...


def _to_langchain(system_prompt: str, messages: list[CoachMessage]) -> list[BaseMessage]:
    converted: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    for message in messages:
        if message.role == "assistant":
            converted.append(AIMessage(content=message.content))
        else:
            converted.append(HumanMessage(content=message.content))
    return converted


class ChatOpenAILanguageModel:
    """LanguageModelClient backed by langchain-openai."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", llm: ChatOpenAI | None = None):
        """Initialize the client.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            llm: Pre-built ChatOpenAI instance (tests)

        Raises:
            ValueError: If no API key is configured and no llm is supplied
        """
        self.model = model
        if llm is None:
            if not api_key:
                raise ValueError(
                    "OPENAI_API_KEY is not set. Please configure it in your .env file or environment variables."
                )
            llm = ChatOpenAI(model=model, api_key=SecretStr(api_key))
        self.llm = llm

    async def converse(
        self,
        system_prompt: str,
        messages: list[CoachMessage],
        *,
        max_tokens: int,
        temperature: float,
    ) -> LlmReply:
        """Send one conversation turn to the model.

        Args:
            system_prompt: Full system prompt
            messages: History plus the new user turn (no system messages)
            max_tokens: Reply token cap
            temperature: Sampling temperature

        Returns:
            LlmReply with the reply text and token usage

        Raises:
            LanguageModelError: If the call fails or returns no text
        """
        start = time.perf_counter()
        try:
            response = await self.llm.bind(max_tokens=max_tokens, temperature=temperature).ainvoke(
                _to_langchain(system_prompt, messages)
            )
        except Exception as e:
            logger.error("Coach model call failed", model=self.model, error=str(e))
            raise LanguageModelError(self.model, str(e)) from e

        text = response.content if isinstance(response.content, str) else ""
        if not text.strip():
            raise LanguageModelError(self.model, "No content in model response")

        usage = getattr(response, "usage_metadata", None) or {}
        reply = LlmReply(
            text=text,
            model=self.model,
            input_tokens=usage.get("input_tokens"),
            output_tokens=usage.get("output_tokens"),
        )
        logger.info(
            "Coach model call completed",
            model=self.model,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
            input_tokens=reply.input_tokens,
            output_tokens=reply.output_tokens,
        )
        return reply
