"""Text helpers shared by the reviewer stages."""


def truncate(text: str, max_len: int = 5000) -> str:
    """Shorten long text, keeping its start and end around a marker."""
    if len(text) <= max_len:
        return text
    half = max(0, (max_len - 40) // 2)
    return (
        text[:half]
        + f"\n\n... [truncated {len(text) - max_len} chars] ...\n\n"
        + text[len(text) - half:]
    )
