"""Edit-distance helpers used for fuzzy business-name comparison."""


def levenshtein_distance(str1: str, str2: str) -> int:
    """Return the Levenshtein edit distance between two strings.

    Insertions, deletions and substitutions each cost 1.  A full
    ``(len2 + 1) x (len1 + 1)`` matrix is built; inputs are short
    normalized names so the quadratic cost is acceptable.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    matrix: list[list[int]] = [[0] * (len(str1) + 1) for _ in range(len(str2) + 1)]

    for i in range(len(str2) + 1):
        matrix[i][0] = i
    for j in range(len(str1) + 1):
        matrix[0][j] = j

    for i in range(1, len(str2) + 1):
        for j in range(1, len(str1) + 1):
            if str2[i - 1] == str1[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j - 1] + 1,  # substitution
                    matrix[i][j - 1] + 1,      # insertion
                    matrix[i - 1][j] + 1,      # deletion
                )

    return matrix[len(str2)][len(str1)]


def levenshtein_similarity(str1: str, str2: str) -> float:
    """Return a 0.0-1.0 similarity derived from edit distance.

    Computed as ``1 - distance / max(len1, len2)``.  Two empty strings are
    vacuously identical and score 1.0.

    Examples:
        >>> levenshtein_similarity("", "")
        1.0
        >>> levenshtein_similarity("abcd", "abce")
        0.75
    """
    longest = max(len(str1), len(str2))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(str1, str2)) / longest
