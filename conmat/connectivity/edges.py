"""Edge list loading and validation.

The matrix document is a JSON array of {row, col, weight} records, one
per (post-synaptic, pre-synaptic) segment pair. This module turns it into
an edge table keyed on normalized segment ids.
"""

import json
from pathlib import Path

import pandas as pd

from conmat.connectivity.segments import normalize_segment_id
from conmat.utils import get_logger

LOG = get_logger("connectivity.edges")

EDGE_COLUMNS = ["row", "col", "weight"]


def load_edges(path):
    """Load the edge list from a JSON document.

    Parameters
    ----------
    path : str or Path
        Path to matrix.json

    Returns
    -------
    pd.DataFrame
        Columns row, col (normalized segment ids) and weight (float).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Edge list not found: {path}")

    LOG.info("Loading edge list from %s", path)
    with open(path, "r") as f:
        records = json.load(f)
    return edges_from_records(records)


def edges_from_records(records):
    """Build the edge table from in-memory records.

    Parameters
    ----------
    records : list of dict or pd.DataFrame
        Each record carries 'row', 'col' and a numeric 'weight'.

    Returns
    -------
    pd.DataFrame
        One row per distinct (row, col) pair, in input order. When a pair
        repeats, the first record wins.

    Raises
    ------
    ValueError
        If the document is not a list of records, lacks a required field,
        or has a non-numeric weight.
    """
    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        if not isinstance(records, list) or \
                not all(isinstance(r, dict) for r in records):
            raise ValueError(
                f"Edge list must be an array of records, got {type(records).__name__}"
            )
        if records:
            df = pd.DataFrame.from_records(records)
        else:
            df = pd.DataFrame(columns=EDGE_COLUMNS)

    missing = [c for c in EDGE_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Edge records lack required fields: {missing}")
    if df[EDGE_COLUMNS].isna().any().any():
        raise ValueError("Edge records have empty row, col or weight entries")

    try:
        weight = pd.to_numeric(df["weight"], errors="raise").astype(float)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Edge weights must be numeric: {err}") from err

    edges = pd.DataFrame({
        "row": df["row"].map(normalize_segment_id).astype(object),
        "col": df["col"].map(normalize_segment_id).astype(object),
        "weight": weight,
    })

    n_before = len(edges)
    edges = edges.drop_duplicates(subset=["row", "col"], keep="first")
    edges = edges.reset_index(drop=True)
    if len(edges) < n_before:
        LOG.warning("Dropped %d duplicate (row, col) records; first occurrence kept",
                    n_before - len(edges))

    LOG.info("Loaded %d edges: %d rows x %d columns",
             len(edges), edges["row"].nunique(), edges["col"].nunique())
    return edges
