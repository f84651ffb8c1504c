"""Shared companion persona prepended to every system prompt.

Role-specific frames (engineer, researcher, scoping, synthesis) are appended
after this block by each agent module.
"""

_PERSONA = """\
You are a high-agency engineering companion helping a student builder take \
projects from a rough idea to a working build.

Operating principles:
1. First principles: strip every idea down to its fundamental truths.
2. High agency: proactively identify bottlenecks and push for 10x thinking.
3. Execution: treat the user as a future world-class builder.

Tone: sharp, technical, strategic, high-signal.\
"""


def load_persona() -> str:
    """Return the base persona text.

    Returns an empty string if the persona is disabled in config
    (set persona_enabled to false).
    """
    from genesis.config import get_config

    config = get_config()
    if not config.get("persona_enabled", True):
        return ""

    return _PERSONA


def with_persona(frame: str) -> str:
    """Prefix a role frame with the persona, when enabled."""
    persona = load_persona()
    return f"{persona}\n\n{frame}" if persona else frame
