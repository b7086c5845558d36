"""Segment identifiers: one canonical string form across all inputs.

The same body can appear as the integer 10327 in the edge list, the
string "10327" in the metadata table, and the token "!10327" in a
Neuroglancer state. Every join in conmat keys on the normalized form.
"""

import numbers

SENTINEL = "!"
"""Neuroglancer prefix marking a segment as visible in a layer."""


def _to_text(value):
    """Render a raw identifier as text, integral numbers without a fraction."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return str(int(value))
    return str(value)


def strip_sentinel(token):
    """Remove a single leading sentinel, if present."""
    if token.startswith(SENTINEL):
        return token[len(SENTINEL):]
    return token


def add_sentinel(segment_id):
    return f"{SENTINEL}{segment_id}"


def has_sentinel(token):
    """True if a raw segment token carries the sentinel prefix."""
    return isinstance(token, str) and token.startswith(SENTINEL)


def normalize_segment_id(value):
    """Canonical SegmentId for any raw identifier.

    Trims surrounding whitespace and strips the leading sentinel. A
    doubled sentinel ("!!5") is stripped down to the bare id as well, so
    normalizing an already-normalized id returns it unchanged.

    Parameters
    ----------
    value : str, int, or float
        Raw identifier as it appears in a source dataset.

    Returns
    -------
    str
    """
    text = _to_text(value).strip()
    while text.startswith(SENTINEL):
        text = strip_sentinel(text).strip()
    return text


def unique_segments(values):
    """Normalize a sequence of ids, dropping repeats and keeping first-seen order."""
    seen = {}
    for value in values:
        seen.setdefault(normalize_segment_id(value), None)
    return list(seen)
