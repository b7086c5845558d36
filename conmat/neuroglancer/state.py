"""Neuroglancer viewer-state documents.

A state is a nested JSON document. The part conmat cares about is one
named layer in its ``layers`` array, whose ``segments`` list holds the
visible segment ids, either bare ("10327") or with the visibility
sentinel ("!10327"). Each document picks one of the two conventions;
ViewerState records which one, once, when it is created.
"""

import copy
import json
from pathlib import Path

from conmat.config import LAYER_NAME
from conmat.connectivity.segments import has_sentinel, unique_segments
from conmat.utils import get_logger

LOG = get_logger("neuroglancer.state")

PREFIXED = "prefixed"
BARE = "bare"


def load_state(path):
    """Load a Neuroglancer state document from a JSON file.

    Returns
    -------
    dict

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the document has no ``layers`` list, or holds NaN or infinite
        numbers.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Viewer state not found: {path}")

    LOG.info("Loading viewer state from %s", path)
    with open(path, "r") as f:
        document = json.load(f)
    validate_state(document)
    LOG.info("Viewer state has %d layers: %s", len(document["layers"]),
             [layer.get("name") for layer in document["layers"]
              if isinstance(layer, dict)])
    return document


def validate_state(document):
    if not isinstance(document, dict):
        raise ValueError(
            f"Viewer state must be a JSON object, got {type(document).__name__}"
        )
    if not isinstance(document.get("layers"), list):
        raise ValueError("Viewer state lacks a 'layers' list")
    try:
        json.dumps(document, allow_nan=False)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Viewer state is not valid JSON: {err}") from err
    return document


def find_layer(document, layer_name=LAYER_NAME):
    """The first layer whose name matches exactly, or None."""
    for layer in document.get("layers") or []:
        if isinstance(layer, dict) and layer.get("name") == layer_name:
            return layer
    return None


def layer_segments(document, layer_name=LAYER_NAME):
    """Raw segment tokens of the named layer.

    Returns None if the layer is absent or has no ``segments`` field.
    """
    layer = find_layer(document, layer_name)
    if layer is None or layer.get("segments") is None:
        return None
    return list(layer["segments"])


def detect_convention(document, layer_name=LAYER_NAME):
    """How a document writes segment ids: PREFIXED or BARE.

    Decided by the first existing segment of the named layer. A layer
    with no segments, or no such layer, counts as BARE.
    """
    segments = layer_segments(document, layer_name)
    if segments and has_sentinel(segments[0]):
        return PREFIXED
    return BARE


class ViewerState:
    """A base viewer-state document bound to one segmentation layer.

    The document is copied on construction, so later changes to the
    caller's dict can not alter the stored convention or the encoded
    links.

    Parameters
    ----------
    document : dict
        Neuroglancer state with a ``layers`` list.
    layer_name : str
        Name of the layer whose segments mirror the selection.
    """

    def __init__(self, document, layer_name=LAYER_NAME):
        validate_state(document)
        self._document = copy.deepcopy(document)
        self.layer_name = layer_name
        self.convention = detect_convention(self._document, layer_name)
        self.has_layer = find_layer(self._document, layer_name) is not None
        if not self.has_layer:
            LOG.warning("Layer '%s' not found; deep links will carry no selection",
                        layer_name)

    @classmethod
    def from_file(cls, path, layer_name=LAYER_NAME):
        return cls(load_state(path), layer_name=layer_name)

    @property
    def prefixed(self):
        return self.convention == PREFIXED

    @property
    def document(self):
        """A fresh deep copy of the base document."""
        return copy.deepcopy(self._document)

    def initial_segments(self):
        """Normalized, de-duplicated segments of the layer, or None.

        None means the layer (or its segments field) is absent, and the
        selection should keep whatever it had.
        """
        segments = layer_segments(self._document, self.layer_name)
        if segments is None:
            return None
        return unique_segments(segments)

    def __repr__(self):
        return (f"ViewerState(layer={self.layer_name!r}, "
                f"convention={self.convention}, has_layer={self.has_layer})")
