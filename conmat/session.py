"""Session context: the three inputs, the selection, and what derives from them.

The edge list, the metadata table and the base viewer state load
independently and may arrive in any order, or fail. Each input sits in a
slot that is PENDING, READY or FAILED. After every change the session
re-evaluates what has become computable:

    edges + metadata   -> DatasetIndex (matrix joined with metadata)
    viewer state       -> one-time seeding of the selection
    metadata + seed    -> focus on the first seeded segment, if it has a record
    metadata + focus   -> the record shown in the side panel
    viewer state + sel -> the deep link (recomputed on every request)

A failed input blocks only what depends on it.
"""

from enum import Enum

from conmat.bench.dataset import LocalDataset
from conmat.config import PortalConfig
from conmat.connectivity.edges import load_edges
from conmat.connectivity.matrix import ConnectivityMatrix, build_index
from conmat.connectivity.metadata import MetadataTable, load_metadata
from conmat.neuroglancer.link import encode_state
from conmat.neuroglancer.state import ViewerState, load_state
from conmat.selection import SelectionState
from conmat.utils import get_logger

LOG = get_logger("session")

EDGES = "edges"
METADATA = "metadata"
STATE = "state"
INPUTS = (EDGES, METADATA, STATE)


class LoadStatus(Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


def input_datasets(config):
    """Dataset descriptors for the three inputs named by a PortalConfig."""
    return {
        EDGES: LocalDataset(
            name=EDGES, loader=load_edges,
            origin=config.path_to("matrix"),
            description="Weighted (row, col) edge records",
        ),
        METADATA: LocalDataset(
            name=METADATA,
            loader=lambda p: load_metadata(p, key_field=config.key_field),
            origin=config.path_to("metadata"),
            description="Per-segment cell info, all text",
        ),
        STATE: LocalDataset(
            name=STATE, loader=load_state,
            origin=config.path_to("state"),
            description="Base Neuroglancer viewer state",
        ),
    }


class Session:
    """All state of one explorer session.

    Parameters
    ----------
    config : PortalConfig, optional
        Defaults to PortalConfig().
    """

    def __init__(self, config=None):
        self.config = config or PortalConfig()
        self.selection = SelectionState(
            defaults=self.config.default_segments,
            clear_policy=self.config.clear_policy,
        )
        self.status = {name: LoadStatus.PENDING for name in INPUTS}
        self.errors = {}
        self.matrix = None
        self.metadata = None
        self.viewer_state = None
        self.index = None
        self._watchers = []

    # --- observation ---

    def watch(self, callback):
        """Call callback(session) after every change. Returns the callback."""
        self._watchers.append(callback)
        return callback

    def _notify(self):
        for callback in list(self._watchers):
            callback(self)

    def is_ready(self, *names):
        names = names or INPUTS
        return all(self.status[n] is LoadStatus.READY for n in names)

    @property
    def error(self):
        """Message of the first failed input, or None."""
        for name in INPUTS:
            if name in self.errors:
                return f"Failed to load {name}: {self.errors[name]}"
        return None

    # --- inputs ---

    def set_edges(self, records):
        """Provide the edge list (records, DataFrame or ConnectivityMatrix)."""
        return self._provide(EDGES, lambda: (
            records if isinstance(records, ConnectivityMatrix)
            else ConnectivityMatrix(records)
        ))

    def set_metadata(self, records):
        """Provide the metadata table (records, DataFrame or MetadataTable)."""
        return self._provide(METADATA, lambda: (
            records if isinstance(records, MetadataTable)
            else MetadataTable(records, key_field=self.config.key_field)
        ))

    def set_viewer_state(self, document):
        """Provide the base viewer state (dict or ViewerState)."""
        return self._provide(STATE, lambda: (
            document if isinstance(document, ViewerState)
            else ViewerState(document, layer_name=self.config.layer_name)
        ))

    def fail(self, name, error):
        """Record that an input could not be loaded."""
        self.status[name] = LoadStatus.FAILED
        self.errors[name] = str(error)
        LOG.error("Failed to load %s: %s", name, error)
        self._notify()

    def _provide(self, name, build):
        try:
            value = build()
        except (ValueError, KeyError, TypeError) as err:
            self.fail(name, err)
            return False

        if name == EDGES:
            self.matrix = value
        elif name == METADATA:
            self.metadata = value
        else:
            self.viewer_state = value
        self.status[name] = LoadStatus.READY
        self.errors.pop(name, None)
        self._refresh()
        self._notify()
        return True

    def load(self, name, path=None):
        """Load one input from disc and provide it to the session.

        Parameters
        ----------
        name : str
            "edges", "metadata" or "state".
        path : str or Path, optional
            Overrides the location from the config.

        Returns
        -------
        bool
            True if the input is now READY.
        """
        dataset = input_datasets(self.config)[name]
        try:
            value = dataset.load(path or dataset.origin)
        except (OSError, ValueError) as err:
            self.fail(name, err)
            return False

        setter = {
            EDGES: self.set_edges,
            METADATA: self.set_metadata,
            STATE: self.set_viewer_state,
        }[name]
        return setter(value)

    def load_all(self, order=INPUTS):
        """Load every input; a failure in one does not stop the others."""
        return {name: self.load(name) for name in order}

    # --- derived values ---

    def _refresh(self):
        if self.index is None and self.matrix is not None and self.metadata is not None:
            self.index = build_index(self.matrix, self.metadata,
                                     key_field=self.config.key_field)

        if self.viewer_state is not None and not self.selection.initialized:
            self.selection.initialize_from(self.viewer_state)
        self.selection.apply_seed_focus(self.metadata)

    @property
    def displayed_metadata(self):
        """Record for the side panel, or None (nothing focused, still
        loading, or no metadata for the focused segment)."""
        return self.selection.displayed_metadata(self.metadata)

    def displayed_rows(self):
        if self.metadata is None or self.selection.focus is None:
            return []
        return self.metadata.display_rows(self.selection.focus)

    def neuroglancer_url(self):
        """Deep link for the current selection; "" until the state is loaded."""
        if self.viewer_state is None:
            return ""
        return encode_state(self.viewer_state, self.selection.segments,
                            viewer_url=self.config.viewer_url)

    # --- user actions ---

    def on_cell_click(self, row, col):
        segment_id = self.selection.on_cell_click(row, col)
        if self.metadata is not None and segment_id not in self.metadata:
            LOG.warning("No metadata for clicked segment %s", segment_id)
        self._notify()
        return segment_id

    def add(self, segment_id):
        segment_id = self.selection.add(segment_id)
        self._notify()
        return segment_id

    def reset(self):
        self.selection.reset()
        self._notify()

    def clear(self):
        self.selection.clear()
        self._notify()
