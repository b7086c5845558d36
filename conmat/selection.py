"""The ordered selection of segments and the segment in focus.

The selection is what the user has collected by clicking matrix cells;
it is mirrored into the viewer's segment list. The focus is the segment
whose metadata the side panel shows, normally the one most recently
selected.
"""

from conmat.config import DEFAULT_SEGMENTS, RETAIN, RESET, CLEAR_POLICIES
from conmat.connectivity.segments import normalize_segment_id, unique_segments
from conmat.utils import get_logger

LOG = get_logger("selection")


def resolve_click(row, col):
    """Segment id selected by a click on matrix cell (row, col).

    Clicks select along the column (pre-synaptic) axis; the row is
    informational only.
    """
    return normalize_segment_id(col)


class SelectionState:
    """Ordered, duplicate-free selection of segment ids plus the focus.

    Every operation is total: none of them raise for unknown ids.

    Parameters
    ----------
    defaults : sequence of str
        The demo pair restored by reset(), also the starting selection.
    clear_policy : str
        "retain" keeps the focus when the selection is cleared, "reset"
        drops it.
    """

    def __init__(self, defaults=DEFAULT_SEGMENTS, clear_policy=RETAIN):
        if clear_policy not in CLEAR_POLICIES:
            raise ValueError(f"Unknown clear_policy '{clear_policy}'. "
                             f"Use one of {CLEAR_POLICIES}.")
        self.defaults = tuple(unique_segments(defaults))
        self.clear_policy = clear_policy
        self._segments = list(self.defaults)
        self.focus = None
        self.seed_focus = None
        self.initialized = False

    @property
    def segments(self):
        """The selection, in insertion order (a copy)."""
        return list(self._segments)

    def __len__(self):
        return len(self._segments)

    def __iter__(self):
        return iter(list(self._segments))

    def __contains__(self, segment_id):
        return normalize_segment_id(segment_id) in self._segments

    def display(self):
        """The selection as shown above the matrix."""
        return ", ".join(self._segments)

    def add(self, segment_id):
        """Append a segment unless already selected; focus on it either way.

        Returns
        -------
        str
            The normalized id.
        """
        segment_id = normalize_segment_id(segment_id)
        if segment_id not in self._segments:
            self._segments.append(segment_id)
        self.focus = segment_id
        self.seed_focus = None
        return segment_id

    def on_cell_click(self, row, col):
        """Add the clicked column's segment to the selection."""
        segment_id = self.add(resolve_click(row, col))
        LOG.debug("Clicked row %s, col %s -> %s", row, col, segment_id)
        return segment_id

    def reset(self):
        """Restore the default pair, whatever the current selection."""
        self._segments = list(self.defaults)

    def clear(self):
        """Empty the selection. The focus follows the clear policy."""
        self._segments = []
        if self.clear_policy == RESET:
            self.focus = None
            self.seed_focus = None

    def initialize_from(self, viewer_state):
        """Seed the selection from the base viewer state.

        Replaces the selection wholesale, discarding any prior edits. If
        the state's layer (or its segments) is absent, the selection is
        left as it was. The first seeded segment becomes the focus only
        once apply_seed_focus() finds a metadata record for it.

        Parameters
        ----------
        viewer_state : ViewerState

        Returns
        -------
        bool
            True if the selection was replaced.
        """
        self.initialized = True
        segments = viewer_state.initial_segments()
        if segments is None:
            LOG.info("No segments in layer '%s'; keeping %s",
                     viewer_state.layer_name, self._segments)
            return False

        self._segments = segments
        if segments:
            self.seed_focus = segments[0]
        LOG.info("Selection seeded from viewer state: %s", self.display())
        return True

    def displayed_metadata(self, metadata):
        """Metadata record of the focused segment, or None.

        Parameters
        ----------
        metadata : MetadataTable or None
            None while the metadata is still loading.
        """
        if metadata is None or self.focus is None:
            return None
        return metadata.metadata_for(self.focus)

    def apply_seed_focus(self, metadata):
        """Move the focus to the seeded segment once metadata is known.

        The seeded segment takes the focus only if it has a metadata
        record; otherwise the current focus stays. A click since seeding
        cancels the pending seed.

        Returns
        -------
        bool
            True if the focus moved.
        """
        if self.seed_focus is None or metadata is None:
            return False
        segment_id, self.seed_focus = self.seed_focus, None
        if segment_id not in metadata:
            LOG.info("No metadata for seeded segment %s; focus stays on %s",
                     segment_id, self.focus)
            return False
        self.focus = segment_id
        return True
