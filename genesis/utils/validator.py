"""Input validation — checks user text before any service call or ledger write."""


def validate_input(text: str, field: str = "Idea") -> str:
    """Validate that the text is a non-empty string.

    Returns the stripped input on success.
    Raises ValueError if input is empty or whitespace-only.
    """
    if not isinstance(text, str) or not text.strip():
        raise ValueError(f"{field} must be a non-empty string.")
    return text.strip()
