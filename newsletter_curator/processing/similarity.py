"""
String similarity measures for near-duplicate detection.

All measures return a value in [0, 1] and expect inputs that have already
been through the normalizers in ``text_utils``:

- URLs: different domains short-circuit to a fixed low score, otherwise
  normalized edit-distance similarity
- Titles: the larger of word-set Jaccard and edit-distance similarity
- Content: word-set Jaccard only
"""

from .text_utils import significant_words

DIFFERENT_DOMAIN_SIMILARITY = 0.1
TITLE_WORD_MIN_LENGTH = 2
CONTENT_WORD_MIN_LENGTH = 3


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance with unit insert, delete and substitute costs.

    Args:
        a: First string
        b: Second string

    Returns:
        Minimum number of single-character edits turning ``a`` into ``b``
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(
                    previous[j - 1] + 1,  # substitution
                    current[j - 1] + 1,   # insertion
                    previous[j] + 1,      # deletion
                ))
        previous = current

    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """``1 - edit_distance / longest length``."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    return 1.0 - edit_distance(a, b) / max(len(a), len(b))


def jaccard_similarity(words_a: set[str], words_b: set[str]) -> float:
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def _domain_part(url: str) -> str:
    parts = url.split('/')
    return parts[2] if len(parts) > 2 else ''


def url_similarity(a: str, b: str) -> float:
    """Similarity of two normalized URLs."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    if _domain_part(a) != _domain_part(b):
        return DIFFERENT_DOMAIN_SIMILARITY

    return string_similarity(a, b)


def title_similarity(a: str, b: str) -> float:
    """Similarity of two normalized titles.

    Either signal on its own is enough to flag a near-duplicate, so the
    maximum of the two is returned rather than a blend.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    words_a = significant_words(a, TITLE_WORD_MIN_LENGTH)
    words_b = significant_words(b, TITLE_WORD_MIN_LENGTH)
    if not words_a | words_b:
        return 0.0

    return max(jaccard_similarity(words_a, words_b), string_similarity(a, b))


def content_similarity(a: str, b: str) -> float:
    """Similarity of two normalized article bodies."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    return jaccard_similarity(
        significant_words(a, CONTENT_WORD_MIN_LENGTH),
        significant_words(b, CONTENT_WORD_MIN_LENGTH),
    )
