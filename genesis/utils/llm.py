"""Text generation adapter — the single seam between the engine and chat models.

Every call site names a model key from config.yaml. Model names starting with
``claude`` are served by Anthropic, everything else by Google Gemini. Any
failure (provider error, transport error, timeout, empty or malformed output)
is raised as TextGenerationError so callers can substitute their fallback.
No retries: one failed call means one fallback.
"""

import asyncio
import json
from collections.abc import Callable

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from genesis.config import get_config
from genesis.state import ChatTurn
from genesis.utils.parsing import content_text, describe_failure, strip_fences

DEFAULT_TEMPERATURE = 0.7
DEFAULT_TIMEOUT_SECONDS = 90


class TextGenerationError(RuntimeError):
    """The service failed or returned something unusable."""


def build_chat_model(model_name: str, temperature: float = DEFAULT_TEMPERATURE):
    """Instantiate the LangChain chat model that serves ``model_name``."""
    if model_name.startswith("claude"):
        return ChatAnthropic(model=model_name, temperature=temperature)
    return ChatGoogleGenerativeAI(model=model_name, temperature=temperature)


def build_messages(
    system_prompt: str, user_prompt: str, history: list[ChatTurn] | None = None
) -> list[dict]:
    """Assemble system prompt, replayed chat turns, and the new user prompt."""
    messages = [{"role": "system", "content": system_prompt}]
    for turn in history or []:
        role = "user" if turn["speaker"] == "user" else "assistant"
        messages.append({"role": role, "content": turn["text"]})
    messages.append({"role": "user", "content": user_prompt})
    return messages


async def generate_text(
    model_key: str,
    system_prompt: str,
    user_prompt: str,
    history: list[ChatTurn] | None = None,
) -> str:
    """Return free text from the model configured under ``model_key``."""
    config = get_config()
    timeout = config.get("llm_timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    messages = build_messages(system_prompt, user_prompt, history)

    try:
        llm = build_chat_model(config[model_key], config.get("temperature", DEFAULT_TEMPERATURE))
        response = await asyncio.wait_for(llm.ainvoke(messages), timeout=timeout)
    except Exception as exc:
        raise TextGenerationError(f"{model_key}: {describe_failure(exc)}") from exc

    text = content_text(response.content).strip()
    if not text:
        raise TextGenerationError(f"{model_key}: empty response")
    return text


async def generate_json(
    model_key: str,
    system_prompt: str,
    user_prompt: str,
    validate: Callable[[object], object],
):
    """Return a JSON payload that passed ``validate``.

    ``validate`` receives the decoded document, raises ValueError when the
    shape is wrong, and returns the (possibly normalized) value to use.
    """
    text = await generate_text(model_key, system_prompt, user_prompt)
    try:
        data = json.loads(strip_fences(text))
        return validate(data)
    except (ValueError, RecursionError) as exc:  # json.JSONDecodeError is a ValueError
        raise TextGenerationError(f"{model_key}: {describe_failure(exc)}") from exc
