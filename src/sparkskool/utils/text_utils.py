"""Text processing utilities.

Common text manipulation functions used across modules.
"""

import re

# Patterns for removing thinking/reasoning blocks from LLM output
THINK_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]

ANSWER_PUNCTUATION = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()]")
MULTI_SPACE = re.compile(r"\s{2,}")


def strip_think(text: str) -> str:
    """Remove thinking/reasoning tags from LLM output.

    Args:
        text: Raw LLM output text

    Returns:
        Cleaned text without thinking artifacts
    """
    result = text
    for pattern in THINK_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def normalize_answer(text: str) -> str:
    """Normalize an answer for comparison.

    Lowercases, drops common punctuation and collapses runs of whitespace.
    """
    normalized = ANSWER_PUNCTUATION.sub("", text.lower())
    normalized = MULTI_SPACE.sub(" ", normalized)
    return normalized.strip()


def _bigrams(text: str) -> dict[str, int]:
    counts: dict[str, int] = {}
    for i in range(len(text) - 1):
        bigram = text[i : i + 2]
        counts[bigram] = counts.get(bigram, 0) + 1
    return counts


def dice_coefficient(first: str, second: str) -> float:
    """Sørensen-Dice similarity of two strings over character bigrams.

    Whitespace is ignored. Returns 1.0 for identical strings and 0.0 when
    either string is shorter than two characters (unless they are equal).
    """
    first = re.sub(r"\s+", "", first)
    second = re.sub(r"\s+", "", second)

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = _bigrams(first)
    intersection = 0
    for i in range(len(second) - 1):
        bigram = second[i : i + 2]
        count = first_bigrams.get(bigram, 0)
        if count > 0:
            first_bigrams[bigram] = count - 1
            intersection += 1

    return (2.0 * intersection) / (len(first) + len(second) - 2)


def first_line_title(content: str, max_len: int = 50) -> str:
    """Use the first line of a text as its title."""
    return content.split("\n")[0][:max_len]
