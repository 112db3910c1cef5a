"""
String similarity primitives used by the overlap validator.

levenshtein_distance() is the only per-pair O(n*m) cost in overlap validation,
so it keeps a single rolling DP row instead of the full matrix.
"""


def levenshtein_distance(a: str, b: str) -> int:
    """
    Classic edit distance: insertions, deletions and substitutions cost 1.

    Args:
        a: First string.
        b: Second string.

    Returns:
        Minimum number of single-character edits turning a into b.

    Example:
        >>> levenshtein_distance("facebok", "facebook")
        1
    """
    if a == b:
        return 0

    # Iterate over the longer string so the row is as short as possible
    if len(a) < len(b):
        a, b = b, a

    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            substitution = previous[j - 1] + (char_a != char_b)
            current.append(min(previous[j] + 1, current[j - 1] + 1, substitution))
        previous = current

    return previous[-1]


def similarity_ratio(a: str, b: str) -> float:
    """
    Normalized similarity: (max_len - distance) / max_len.

    Two empty strings are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest
