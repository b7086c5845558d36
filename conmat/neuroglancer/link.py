"""Encode a selection into a Neuroglancer deep link, and back.

The link is the viewer's base address followed by ``#!`` and the
percent-escaped JSON state. Encoding never mutates the base document and
is deterministic: the same selection against the same base gives the
same bytes.
"""

import json
from urllib.parse import quote, unquote

from conmat.config import LAYER_NAME, VIEWER_URL
from conmat.connectivity.segments import add_sentinel, normalize_segment_id
from conmat.neuroglancer.state import ViewerState, find_layer
from conmat.utils import get_logger

LOG = get_logger("neuroglancer.link")

FRAGMENT_MARKER = "#!"

# Characters a browser's encodeURIComponent leaves alone, beyond A-Z a-z 0-9 - _ .
_URI_COMPONENT_SAFE = "!~*'()"


def _as_viewer_state(base, layer_name):
    if isinstance(base, ViewerState):
        return base
    return ViewerState(base, layer_name=layer_name)


def updated_document(base, selection, layer_name=LAYER_NAME):
    """Copy of the base state with the layer's segments set to the selection.

    Parameters
    ----------
    base : ViewerState or dict
        The base state. A dict is wrapped, its convention detected on the
        spot.
    selection : iterable of str
        Selected segment ids, in order.
    layer_name : str
        Only used when base is a dict.

    Returns
    -------
    dict
        If the layer is absent the copy is returned unmodified. Otherwise
        its ``segments`` follow the base's convention, and
        ``segmentQuery`` names the first selected segment (it is removed
        when the selection is empty).
    """
    state = _as_viewer_state(base, layer_name)
    document = state.document
    layer = find_layer(document, state.layer_name)
    if layer is None:
        return document

    ids = [normalize_segment_id(s) for s in selection]
    if state.prefixed:
        layer["segments"] = [add_sentinel(s) for s in ids]
    else:
        layer["segments"] = ids

    if ids:
        layer["segmentQuery"] = ids[0]
    else:
        layer.pop("segmentQuery", None)
    return document


def serialize_state(document):
    """Compact JSON text of a state document, key order preserved.

    NaN and infinite numbers have no JSON form and raise ValueError.
    """
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False,
                      allow_nan=False)


def neuroglancer_url(document, viewer_url=VIEWER_URL):
    """Deep link opening the viewer at the given state."""
    escaped = quote(serialize_state(document), safe=_URI_COMPONENT_SAFE)
    return f"{viewer_url}{FRAGMENT_MARKER}{escaped}"


def encode_state(base, selection, viewer_url=VIEWER_URL, layer_name=LAYER_NAME):
    """Deep link showing the selection in the base state's layer.

    Parameters
    ----------
    base : ViewerState or dict
    selection : iterable of str
    viewer_url : str
        Base address of the Neuroglancer instance.
    layer_name : str
        Only used when base is a dict.

    Returns
    -------
    str
    """
    document = updated_document(base, selection, layer_name=layer_name)
    return neuroglancer_url(document, viewer_url=viewer_url)


def decode_url(url):
    """Recover the state document from a deep link.

    Raises
    ------
    ValueError
        If the URL has no ``#!`` fragment or the fragment is not JSON.
    """
    _, marker, fragment = url.partition(FRAGMENT_MARKER)
    if not marker:
        raise ValueError(f"Not a Neuroglancer state URL (no '{FRAGMENT_MARKER}'): "
                         f"{url[:80]}")
    try:
        return json.loads(unquote(fragment))
    except json.JSONDecodeError as err:
        raise ValueError(f"State fragment is not valid JSON: {err}") from err
