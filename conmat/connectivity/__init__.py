"""connectivity — Edge list, metadata table, and their join.

Load the {row, col, weight} edge list and the per-segment cell info
table, normalize segment ids, and build the DatasetIndex that the matrix
view and the metadata panel read from.
"""

from .segments import (
    SENTINEL,
    normalize_segment_id,
    strip_sentinel,
    add_sentinel,
    unique_segments,
)
from .edges import (
    load_edges,
    edges_from_records,
)
from .metadata import (
    MetadataTable,
    load_metadata,
    display_value,
)
from .matrix import (
    ConnectivityMatrix,
    DatasetIndex,
    build_index,
)
