import math
import re


CHARS_PER_TOKEN_ESTIMATE = 4
MIN_REVIEW_LENGTH = 20
EMPTY_REVIEW_MAX_LENGTH = 100
TRUNCATION_MARKER = "\n...[truncated]\n"

EMPTY_REVIEW_PHRASES = (
    "no issues",
    "looks good",
    "lgtm",
    "no problems",
    "no concerns",
    "sorun yok",
    "problem yok",
    "iyi görünüyor",
    "nothing to report",
    "no suggestions",
)

POLICY_KEYWORDS = (
    "kritik",
    "critical",
    "security",
    "rce",
    "sql injection",
    "auth bypass",
)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def clamp_int(value: str | int | None, default: int, minimum: int, maximum: int) -> int:
    """Parse a base-10 integer and clamp it into [minimum, maximum].

    Missing or unparsable values return ``default`` as is.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    else:
        match = _INT_PREFIX.match(value or "")
        if not match:
            return default
        number = int(match.group(1))
    return max(minimum, min(maximum, number))


def estimate_tokens(text: str | None) -> int:
    """Rough token count used for size warnings only."""
    return math.ceil(len(text or "") / CHARS_PER_TOKEN_ESTIMATE)


def chunk_string(text: str | None, size: int) -> list[str | None]:
    if not text or len(text) <= size:
        return [text]
    return [text[i:i + size] for i in range(0, len(text), size)]


def trim_diff(patch: str | None, max_chars: int) -> str:
    if not patch:
        return ""
    if len(patch) <= max_chars:
        return patch
    return patch[:max_chars] + TRUNCATION_MARKER


def is_empty_review(content: str | None) -> bool:
    """Check whether a generated review carries nothing worth posting.

    Short answers are always noise. Answers below EMPTY_REVIEW_MAX_LENGTH are
    noise when they contain one of the "nothing to report" phrases; longer
    answers are kept even if they say "looks good" somewhere.
    """
    if not content:
        return True
    length = len(content.strip())
    if length < MIN_REVIEW_LENGTH:
        return True
    if length >= EMPTY_REVIEW_MAX_LENGTH:
        return False
    lower = content.lower()
    return any(phrase in lower for phrase in EMPTY_REVIEW_PHRASES)


def get_first_hunk_position(patch: str | None) -> int:
    """Return the 1-based line of the first changed line in a patch.

    File headers (``+++``/``---``) are skipped. Falls back to 1.
    """
    if not patch:
        return 1
    for index, line in enumerate(patch.split("\n"), start=1):
        if line.startswith(("+++", "---")):
            continue
        if line.startswith(("+", "-")):
            return index
    return 1


def find_policy_matches(text: str | None, keywords: tuple[str, ...] = POLICY_KEYWORDS) -> list[str]:
    """Return the severity keywords found in text, case-insensitive."""
    lower = (text or "").lower()
    return [keyword for keyword in keywords if keyword in lower]
