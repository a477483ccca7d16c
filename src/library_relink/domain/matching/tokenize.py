"""
Word tokenization for track/file matching.
"""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def tokenize(text: str | None) -> list[str]:
    """Split text into lowercase ASCII alphanumeric tokens, in order.

    Examples:
        >>> tokenize("Daft Punk - One More Time (Radio Edit)")
        ['daft', 'punk', 'one', 'more', 'time', 'radio', 'edit']
        >>> tokenize("  --  ")
        []
    """
    if not text:
        return []
    return _NON_ALNUM.sub(" ", text.lower()).split()
