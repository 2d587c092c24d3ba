# tebak_bot/utils/fuzzy.py
from typing import Optional

# Characters stripped before any comparison
PUNCTUATION = ".,/#!$%^&*;:{}=-_`~()"

_STRIP_TABLE = str.maketrans("", "", PUNCTUATION)

TYPO_MIN_LENGTH = 3
TYPO_MAX_DISTANCE = 2


def normalize(text: Optional[str]) -> str:
    """Lowercase, trim, remove basic punctuation."""
    if not text:
        return ""
    return text.lower().translate(_STRIP_TABLE).strip()


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert / delete / substitute, unit cost)."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current

    return previous[-1]


def is_typo_equivalent(user: str, candidate: str) -> bool:
    """
    True if two normalized strings are within typo distance.

    Only the user's side is length-guarded: a short candidate can still be
    reached by a longer user answer.
    """
    if len(user) <= TYPO_MIN_LENGTH:
        return False
    return levenshtein(user, candidate) <= TYPO_MAX_DISTANCE


def same_answer(a: str, b: str) -> bool:
    """Normalized equality, the membership test for accepted answers."""
    return normalize(a) == normalize(b)
