from __future__ import annotations

import json
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx
import logging
from openai import AsyncOpenAI

from intake_agent.config import Settings
from intake_agent.models.session import EntityType, Turn
from intake_agent.services.completion import missing_slots

logger = logging.getLogger(__name__)


class GenerativeCallFailure(Exception):
    """The generative endpoint could not produce a usable reply."""


class TextGenerator(Protocol):
    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        ...


class OpenAITextGenerator:
    """Chat-completions client for any OpenAI compatible endpoint."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._client: Optional[AsyncOpenAI] = None
        if settings.generative_enabled:
            self._client = AsyncOpenAI(
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=httpx.Timeout(settings.timeout_seconds, connect=5.0),
            )

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        if self._client is None:
            raise GenerativeCallFailure("no API key configured")
        try:
            response = await self._client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("text_generator.llm_error %s", exc)
            raise GenerativeCallFailure(str(exc)) from exc

        if not response.choices:
            logger.info("text_generator.no_output")
            raise GenerativeCallFailure("empty completion")
        content = (response.choices[0].message.content or "").strip()
        if not content:
            raise GenerativeCallFailure("empty completion")
        return content


_ROLE_NOUN = {
    EntityType.OWNER: "property owners list their commercial properties",
    EntityType.BRAND: "brands find commercial space to lease",
}

_MONEY_RULE = {
    EntityType.OWNER: "NEVER ask about budget - owners have a rent, not a budget.",
    EntityType.BRAND: "NEVER ask about the rent they expect - brands have a budget. Ask for their monthly budget range instead.",
}


def build_system_prompt(entity_type: EntityType, details: Dict[str, Any]) -> str:
    missing = missing_slots(entity_type, details)
    if missing:
        next_step = f"Ask ONE question, about the {missing[0].value} only."
    else:
        next_step = "All key details are collected; tell them you are moving on to the next step."
    return (
        f"You are a helpful assistant helping {_ROLE_NOUN[entity_type]}.\n"
        "Be conversational and friendly.\n"
        f"You've collected: {json.dumps(details, ensure_ascii=False, sort_keys=True)}\n"
        f"Details are gathered in this order: location, size in sqft, then monthly "
        f"{'rent' if entity_type == EntityType.OWNER else 'budget'}.\n"
        f"{next_step}\n"
        f"{_MONEY_RULE[entity_type]}"
    )


def build_user_prompt(utterance: str, history: Sequence[Turn], window: int = 6) -> str:
    recent = list(history)[-window:] if window > 0 else []
    transcript = "\n".join(
        f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}" for turn in recent
    )
    prompt = f'User said: "{utterance}"\n\n'
    if transcript:
        prompt += f"Previous conversation:\n{transcript}\n\n"
    prompt += "Generate a helpful, conversational response (2-3 sentences max)."
    return prompt


def build_generator(settings: Settings) -> Optional[TextGenerator]:
    if not settings.generative_enabled:
        logger.info("text_generator.disabled reason=no_api_key")
        return None
    return OpenAITextGenerator(settings)
