"""Template token extraction.

A token is two opening braces, one or more non-brace characters and two
closing braces. Whitespace just inside the braces is not part of the
name, so ``{{ nombre }}`` and ``{{nombre}}`` are the same token.
"""

import re

TOKEN_PATTERN = re.compile(r"\{\{([^{}]+)\}\}")


def token_name(raw: str) -> str:
    """Normalize the text captured between the braces."""
    return raw.strip()


def extract_variables(content: str) -> list[str]:
    """Return the distinct token names in ``content``, in first-seen order.

    Names are case-sensitive. Tokens that are only whitespace are skipped.
    """
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(content or ""):
        name = token_name(match.group(1))
        if name:
            seen.setdefault(name, None)
    return list(seen)
