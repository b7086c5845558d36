"""Per-segment metadata: the cell info table and its lookup.

The table is a CSV with one row per segment. Its columns are whatever the
file declares; one of them (bodyId_post by default) is the segment id.
Values are never type-coerced: everything is text, and missing cells
display as "N/A".
"""

from pathlib import Path

import pandas as pd

from conmat.config import KEY_FIELD
from conmat.connectivity.segments import normalize_segment_id
from conmat.utils import get_logger

LOG = get_logger("connectivity.metadata")

MISSING = "N/A"


def load_metadata(path, key_field=KEY_FIELD):
    """Load the cell info table as text.

    Parameters
    ----------
    path : str or Path
        Path to cell_info.csv
    key_field : str
        Column holding the segment id.

    Returns
    -------
    pd.DataFrame
        All columns as strings, headers whitespace-trimmed, key column
        normalized. Blank lines are skipped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Metadata table not found: {path}")

    LOG.info("Loading metadata from %s", path)
    df = pd.read_csv(path, dtype=str, keep_default_na=False,
                     skip_blank_lines=True)
    return clean_metadata(df, key_field=key_field)


def clean_metadata(df, key_field=KEY_FIELD):
    """Trim headers and normalize the key column of a raw metadata table."""
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    if key_field not in df.columns:
        raise ValueError(
            f"Metadata lacks key column '{key_field}'. "
            f"Columns: {list(df.columns)}"
        )
    df[key_field] = [
        "" if _is_missing(v) else normalize_segment_id(v)
        for v in df[key_field]
    ]
    LOG.info("Metadata: %d rows, columns: %s", len(df), list(df.columns))
    return df


def _is_missing(value):
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def display_value(value):
    """Text shown in the metadata panel for a stored value."""
    return MISSING if _is_missing(value) else str(value)


class MetadataTable:
    """Lookup of metadata records by normalized segment id.

    Records whose key normalizes to an empty string are excluded from the
    lookup. If a key repeats, the first record wins.

    Parameters
    ----------
    records : pd.DataFrame or list of dict
        Metadata rows, as produced by load_metadata or given in memory.
    key_field : str
        Column holding the segment id.
    """

    def __init__(self, records, key_field=KEY_FIELD):
        if not isinstance(records, pd.DataFrame):
            records = pd.DataFrame.from_records(list(records))
        table = clean_metadata(records, key_field=key_field)

        self.key_field = key_field
        self.fields = list(table.columns)
        self._records = {}
        n_malformed = 0
        for record in table.to_dict(orient="records"):
            record = {name: (None if _is_missing(value) else str(value))
                      for name, value in record.items()}
            key = record[key_field]
            if not key:
                n_malformed += 1
                continue
            self._records.setdefault(key, record)

        if n_malformed:
            LOG.warning("Excluded %d metadata rows with an empty '%s'",
                        n_malformed, key_field)
        LOG.info("Metadata lookup over %d segments", len(self._records))

    def __len__(self):
        return len(self._records)

    def __contains__(self, segment_id):
        return normalize_segment_id(segment_id) in self._records

    @property
    def keys(self):
        """Segment ids with a metadata record, in table order."""
        return list(self._records)

    def metadata_for(self, segment_id):
        """The metadata record for a segment, or None if there is none.

        The id may be given in any raw form (int, padded string, prefixed
        token); it is normalized before the lookup.
        """
        record = self._records.get(normalize_segment_id(segment_id))
        if record is None:
            return None
        return dict(record)

    def display_rows(self, segment_id):
        """(field, text) pairs for the metadata panel, in column order."""
        record = self.metadata_for(segment_id)
        if record is None:
            return []
        return [(name, display_value(value)) for name, value in record.items()]
