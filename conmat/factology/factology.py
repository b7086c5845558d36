"""Factology: structured factsheets, here about the edge/metadata join."""

from abc import ABC

import pandas as pd

from conmat.factology.fact import fact, annotational, connectomic
from conmat.utils import get_logger

LOG = get_logger("factology")


class Factology(ABC):
    """Abstract base: a collection of Facts about a subject.

    Subclasses define measurement methods decorated with @fact and
    @annotational or @connectomic. The .collect() method gathers them.
    """

    def __init__(self, index):
        """
        Parameters
        ----------
        index : DatasetIndex
            The joined edge list and metadata table.
        """
        self.index = index

    @classmethod
    def fact_methods(cls, fact_type=None):
        """List all methods decorated with @fact, optionally of one category."""
        names = [name for name in dir(cls)
                 if hasattr(getattr(cls, name, None), "__defines_a_fact__")]
        if fact_type is None:
            return names
        return [name for name in names
                if getattr(getattr(cls, name), "__fact_type__", None) == fact_type]

    def collect(self, mode="prod", fact_type=None):
        """Collect all defined facts.

        Parameters
        ----------
        mode : str
            "prod" raises on errors; "dev" tolerates and logs them.
        fact_type : str, optional
            Only facts of this category ("annotational" or "connectomic").

        Returns
        -------
        list of Fact
        """
        results = []
        for method_name in self.fact_methods(fact_type):
            try:
                results.append(getattr(self, method_name)())
            except Exception as e:
                if mode == "prod":
                    raise
                LOG.warning("Skipping fact '%s': %s", method_name, e)
        return results

    def collect_dicts(self, mode="prod"):
        """Collect facts as a list of dicts (for JSON/DataFrame export)."""
        return [f.to_dict() for f in self.collect(mode=mode)]

    def to_dataframe(self, mode="prod"):
        """Collect facts into a DataFrame."""
        return pd.DataFrame(self.collect_dicts(mode=mode))


class JoinFacts(Factology):
    """How the matrix axes line up with the metadata table."""

    @connectomic
    @fact("Matrix rows", "segments")
    def row_count(self):
        """Distinct post-synaptic segments in the edge list."""
        return len(self.index.rows)

    @connectomic
    @fact("Matrix columns", "segments")
    def column_count(self):
        """Distinct pre-synaptic segments in the edge list."""
        return len(self.index.cols)

    @connectomic
    @fact("Edges", "edges")
    def edge_count(self):
        """Distinct (row, col) pairs with a recorded weight."""
        return len(self.index.matrix.edges)

    @annotational
    @fact("Metadata records", "segments")
    def metadata_count(self):
        """Segments with a usable metadata record."""
        return len(self.index.metadata)

    @annotational
    @fact("Overlap", "segments")
    def overlap_count(self):
        """Matrix columns that have a metadata record."""
        return len(self.index.overlap())

    @annotational
    @fact("Columns without metadata", "segments")
    def missing_metadata(self):
        """Matrix columns with no metadata record."""
        return len(self.index.missing_metadata())
