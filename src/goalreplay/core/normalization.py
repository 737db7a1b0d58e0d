"""Text normalization utilities for matching search hits to goals."""

import re
import unicodedata

# Words too generic to identify a club on their own
_GENERIC_TEAM_TOKENS = frozenset(
    {
        "fc", "afc", "cf", "sc", "ac", "as", "ss", "cd", "sd", "ud", "rc",
        "club", "city", "united", "town", "athletic", "sporting", "real",
        "de", "del", "la", "le", "the", "and",
    }
)


def normalize_text(
    text: str,
    *,
    lowercase: bool = True,
    remove_accents: bool = True,
    collapse_whitespace: bool = True,
) -> str:
    """
    Normalize text for matching purposes.

    Punctuation is kept: minute markers such as ``23'`` and ``45+2'`` depend
    on it.

    Args:
        text: Input text to normalize
        lowercase: Convert to lowercase
        remove_accents: Remove diacritical marks (e.g. "Atlético" -> "Atletico")
        collapse_whitespace: Replace multiple spaces with single space

    Returns:
        Normalized string suitable for comparison
    """
    if not text:
        return ""

    result = text

    if remove_accents:
        nfkd = unicodedata.normalize("NFKD", result)
        result = "".join(c for c in nfkd if not unicodedata.combining(c))

    if lowercase:
        result = result.lower()

    # Typographic apostrophes/primes used for minutes
    result = result.replace("’", "'").replace("′", "'").replace("´", "'")

    if collapse_whitespace:
        result = re.sub(r"\s+", " ", result).strip()

    return result


def team_tokens(team: str) -> list[str]:
    """
    Distinctive words of a team name.

    "Manchester United" -> ["manchester"], "Brighton & Hove Albion" ->
    ["brighton", "hove", "albion"]. Short and generic words are dropped.
    """
    words = re.findall(r"\w+", normalize_text(team))
    return [w for w in words if len(w) >= 4 and w not in _GENERIC_TEAM_TOKENS]


def contains_phrase(text: str, phrase: str) -> bool:
    """Whole-word, normalized containment check."""
    needle = normalize_text(phrase)
    if not needle:
        return False
    pattern = rf"(?<!\w){re.escape(needle)}(?!\w)"
    return re.search(pattern, normalize_text(text)) is not None


def minute_pattern(minute: int) -> re.Pattern[str]:
    """
    Regex matching a minute marker in a normalized title.

    Accepts ``23'``, ``23 '``, ``23min``, ``23 mins`` and stoppage-time forms
    such as ``45+2'`` for minute 45.
    """
    return re.compile(rf"(?<![\d+]){minute}(?:\s?'|\s?mins?\b|\+\d{{1,2}}\s?')")
