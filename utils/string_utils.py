"""String helpers shared by the providers and the CLI.

Model responses are frequently wrapped in markdown code fences and can be
long; these helpers clean them up for parsing and shorten them for logs.
"""

import re
from typing import List


_FENCE_BLOCK = re.compile(r'```(?:json)?\s*([\s\S]*?)```')
_LEADING_FENCE = re.compile(r'^```(?:json)?\s*')
_TRAILING_FENCE = re.compile(r'\s*```$')


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate a string to a maximum length.

    Args:
        text: The string to truncate.
        max_length: Maximum length including suffix.
        suffix: String to append when truncated.

    Returns:
        Truncated string with suffix if needed.
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def word_wrap(text: str, width: int = 80) -> List[str]:
    """Wrap text to a specified width.

    Paragraph breaks in the input are kept as empty lines.

    Args:
        text: The text to wrap.
        width: Maximum line width.

    Returns:
        List of wrapped lines.
    """
    lines: List[str] = []

    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current_line: List[str] = []
        current_length = 0

        for word in words:
            if current_line and current_length + len(word) + len(current_line) > width:
                lines.append(" ".join(current_line))
                current_line = [word]
                current_length = len(word)
            else:
                current_line.append(word)
                current_length += len(word)

        if current_line:
            lines.append(" ".join(current_line))

    return lines


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a model response.

    Args:
        text: Raw response text.

    Returns:
        The fenced content if a fence was found, otherwise the stripped text.
    """
    text = text.strip()

    if not text.startswith("```"):
        return text

    match = _FENCE_BLOCK.search(text)
    if match:
        return match.group(1).strip()

    # Unterminated fence
    text = _LEADING_FENCE.sub('', text)
    text = _TRAILING_FENCE.sub('', text)
    return text.strip()
