"""Plain text helpers for order text and API keys."""

# Returned by the extraction stage when nothing orderable was said
NO_ORDER = "No order"

CREDENTIAL_PREFIX = "sk-"


def deduplicate_lines(text: str) -> str:
    """
    Drop blank and repeated lines, keeping the first occurrence of each.

    >>> deduplicate_lines("a\\na\\nb\\n\\n")
    'a\\nb'
    """
    seen = set()
    lines = []
    for line in text.splitlines():
        if not line.strip() or line in seen:
            continue
        seen.add(line)
        lines.append(line)
    return "\n".join(lines)


def validate_credential(value: str) -> bool:
    """Syntactic check only; the remote service is not contacted."""
    return bool(value and value.strip()) and value.startswith(CREDENTIAL_PREFIX)


def mask_credential(value: str) -> str:
    """Display form of a key, e.g. ``sk-...9xQz``."""
    if len(value) <= len(CREDENTIAL_PREFIX) + 4:
        return CREDENTIAL_PREFIX + "..."
    return f"{value[:len(CREDENTIAL_PREFIX)]}...{value[-4:]}"
