"""Segment-level connectivity matrix and the joined dataset index.

The edge list is sparse; the heatmap wants a dense rows x cols grid with
0 where no edge was recorded. The DatasetIndex joins that grid with the
metadata table on normalized segment ids.
"""

import numpy as np
import pandas as pd

from conmat.bench.dataset import evaluate_datasets
from conmat.config import KEY_FIELD
from conmat.connectivity.edges import edges_from_records
from conmat.connectivity.metadata import MetadataTable
from conmat.connectivity.segments import normalize_segment_id
from conmat.factology import JoinFacts
from conmat.utils import get_logger

LOG = get_logger("connectivity.matrix")


class ConnectivityMatrix:
    """Weighted adjacency over (row, col) segment pairs.

    Parameters
    ----------
    edges : pd.DataFrame or list of dict
        Edge records with row, col and weight.

    Attributes
    ----------
    rows : list of str
        Distinct row ids (post-synaptic axis), first-seen order.
    cols : list of str
        Distinct column ids (pre-synaptic axis), first-seen order.
    """

    def __init__(self, edges):
        self.edges = edges_from_records(edges)
        self.rows = list(pd.unique(self.edges["row"]))
        self.cols = list(pd.unique(self.edges["col"]))
        self._weights = {
            (row, col): weight
            for row, col, weight in zip(self.edges["row"],
                                        self.edges["col"],
                                        self.edges["weight"])
        }

    @property
    def shape(self):
        return len(self.rows), len(self.cols)

    def weight(self, row, col):
        """Weight from row to col, 0 when no edge was recorded."""
        key = (normalize_segment_id(row), normalize_segment_id(col))
        return self._weights.get(key, 0.0)

    def dense(self):
        """The fully materialized rows x cols weight grid.

        Returns
        -------
        pd.DataFrame
            Indexed by row id, columns are column ids, missing pairs 0.
        """
        if self.edges.empty:
            return pd.DataFrame(index=pd.Index([], name="row"),
                                columns=pd.Index([], name="col"), dtype=float)
        grid = (self.edges.pivot(index="row", columns="col", values="weight")
                .reindex(index=self.rows, columns=self.cols)
                .fillna(0.0))
        grid.index.name = "row"
        grid.columns.name = "col"
        return grid

    def z(self):
        """Dense weights as a nested list, row-major, for the heatmap."""
        return np.asarray(self.dense().values, dtype=float).tolist()


class DatasetIndex:
    """Read-only join of the connectivity matrix with the metadata table.

    Parameters
    ----------
    matrix : ConnectivityMatrix
    metadata : MetadataTable
    """

    def __init__(self, matrix, metadata):
        self.matrix = matrix
        self.metadata = metadata

    @property
    def rows(self):
        return self.matrix.rows

    @property
    def cols(self):
        return self.matrix.cols

    def weight(self, row, col):
        return self.matrix.weight(row, col)

    def metadata_for(self, segment_id):
        return self.metadata.metadata_for(segment_id)

    def overlap(self):
        """Column ids that have a metadata record, in column order."""
        return [c for c in self.cols if c in self.metadata]

    def missing_metadata(self):
        """Column ids with no metadata record."""
        return [c for c in self.cols if c not in self.metadata]

    def unmatched_metadata(self):
        """Metadata keys that never appear as a matrix column."""
        cols = set(self.cols)
        return [k for k in self.metadata.keys if k not in cols]

    def log_diagnostics(self):
        """Report how well the matrix columns join with the metadata keys."""
        for f in JoinFacts(self).collect(mode="dev"):
            LOG.info("%s", f)
        overlap = self.overlap()
        LOG.info("Overlapping ids, e.g. %s", overlap[:10])
        missing = self.missing_metadata()
        if missing:
            LOG.warning("%d matrix columns have no metadata record, e.g. %s",
                        len(missing), missing[:10])
        return overlap


@evaluate_datasets
def build_index(edges, metadata, key_field=KEY_FIELD):
    """Build the DatasetIndex from edge and metadata records.

    Parameters
    ----------
    edges : pd.DataFrame, list of dict, or Dataset
        Edge records with row, col, weight.
    metadata : pd.DataFrame, list of dict, MetadataTable, or Dataset
        Metadata records keyed by key_field.
    key_field : str
        Metadata column holding the segment id.

    Returns
    -------
    DatasetIndex
        Join misses are not errors; they are logged as diagnostics.
    """
    matrix = edges if isinstance(edges, ConnectivityMatrix) else ConnectivityMatrix(edges)
    if not isinstance(metadata, MetadataTable):
        metadata = MetadataTable(metadata, key_field=key_field)

    index = DatasetIndex(matrix, metadata)
    LOG.info("Built %d x %d connectivity index", *matrix.shape)
    index.log_diagnostics()
    return index
