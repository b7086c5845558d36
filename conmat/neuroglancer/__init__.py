"""neuroglancer — Viewer-state documents and deep links.

Load a base Neuroglancer state, detect how its segmentation layer writes
segment ids, and encode the current selection into a shareable URL.
"""

from .state import (
    BARE,
    PREFIXED,
    ViewerState,
    find_layer,
    layer_segments,
    load_state,
)
from .link import (
    decode_url,
    encode_state,
    neuroglancer_url,
    serialize_state,
    updated_document,
)
