"""Shared parsing helpers for model responses and failure reporting."""

import asyncio
import re
import sys

import httpx

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def strip_fences(text: str) -> str:
    """Strip markdown code fences from LLM output if present."""
    match = _FENCE_RE.search(text)
    return match.group(1).strip() if match else text.strip()


def content_text(content) -> str:
    """Flatten a chat model message content into plain text.

    Providers return either a string or a list of content blocks
    (``{"type": "text", "text": ...}`` dicts or bare strings).
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return ""


def describe_failure(exc: BaseException) -> str:
    """Classify a service failure into a one-line diagnostic."""
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return "timeout"
    if isinstance(exc, httpx.ConnectError):
        return "connection error"
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code}"
    if isinstance(exc, (ValueError, RecursionError)):
        return f"malformed response ({exc})"
    return f"{type(exc).__name__}: {exc}"


def report(message: str) -> None:
    """Write a diagnostic line to stderr."""
    print(f"[GENESIS] {message}", file=sys.stderr)
