import asyncio

import pytest

from intake_agent.config import Settings, load_settings
from intake_agent.models.session import EntityType, Turn
from intake_agent.services.text_generator import (
    GenerativeCallFailure,
    OpenAITextGenerator,
    build_generator,
    build_system_prompt,
    build_user_prompt,
)


def test_settings_from_environment(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test")
    monkeypatch.setenv("INTAKE_LLM_MODEL", "llama-3.1-8b-instant")
    monkeypatch.setenv("INTAKE_LLM_TIMEOUT", "not-a-number")
    monkeypatch.setenv("INTAKE_HISTORY_WINDOW", "4")
    settings = load_settings()
    assert settings.api_key == "gsk-test"
    assert settings.model == "llama-3.1-8b-instant"
    assert settings.timeout_seconds == 10.0
    assert settings.history_window == 4
    assert settings.generative_enabled


def test_no_key_means_no_generator():
    assert build_generator(Settings()) is None
    assert isinstance(build_generator(Settings(api_key="sk-test")), OpenAITextGenerator)


def test_unconfigured_client_raises():
    with pytest.raises(GenerativeCallFailure):
        asyncio.run(OpenAITextGenerator(Settings()).generate("system", "user"))


def test_system_prompt_targets_next_missing_slot():
    owner = build_system_prompt(EntityType.OWNER, {"location": "Koramangala"})
    assert "about the size only" in owner
    assert "NEVER ask about budget" in owner
    assert '"location": "Koramangala"' in owner

    brand = build_system_prompt(EntityType.BRAND, {"location": "HSR Layout", "size": 500})
    assert "about the budget only" in brand


def test_user_prompt_keeps_recent_turns_only():
    history = [Turn(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}") for i in range(8)]
    prompt = build_user_prompt("800", history, window=6)
    assert 'User said: "800"' in prompt
    assert "turn 1\n" not in prompt
    assert "User: turn 2" in prompt
    assert "Assistant: turn 7" in prompt
