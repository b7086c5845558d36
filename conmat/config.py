"""Portal configuration: viewer target, default selection, and display settings.

Defaults target the public Neuroglancer instance and the MANC v1.2.3
segmentation layer. Any subset can be overridden from a YAML file:

    layer_name: "manc:v1.2.3"
    viewer_url: "https://neuroglancer-demo.appspot.com/"
    default_segments: ["10327", "11670"]
    clear_policy: retain
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Tuple

import yaml

from conmat.utils import get_logger

LOG = get_logger("config")


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

LAYER_NAME = "manc:v1.2.3"
VIEWER_URL = "https://neuroglancer-demo.appspot.com/"
DEFAULT_SEGMENTS = ("10327", "11670")
KEY_FIELD = "bodyId_post"

MATRIX_FILE = "matrix.json"
METADATA_FILE = "cell_info.csv"
STATE_FILE = "state.json"

# What Clear() does to the metadata panel.
RETAIN = "retain"   # keep showing the last segment
RESET = "reset"     # blank the panel together with the selection
CLEAR_POLICIES = (RETAIN, RESET)


@dataclass(frozen=True)
class PortalConfig:
    """Tunable settings for a matrix-explorer session.

    Parameters
    ----------
    layer_name : str
        Name of the segmentation layer in the Neuroglancer state whose
        ``segments`` field mirrors the selection.
    viewer_url : str
        Base address of the Neuroglancer instance the deep link targets.
    default_segments : tuple of str
        Selection restored by Reset, and the selection before the viewer
        state arrives.
    key_field : str
        Metadata column holding the segment identifier.
    data_dir : str
        Directory holding the three input files.
    matrix_file, metadata_file, state_file : str
        Input file names, relative to data_dir.
    zmin, zmax : float
        Heatmap color range.
    colorscale : str
        Plotly colorscale name for the heatmap.
    clear_policy : str
        "retain" keeps the metadata panel on Clear, "reset" blanks it.
    """
    layer_name: str = LAYER_NAME
    viewer_url: str = VIEWER_URL
    default_segments: Tuple[str, ...] = DEFAULT_SEGMENTS
    key_field: str = KEY_FIELD
    data_dir: str = "."
    matrix_file: str = MATRIX_FILE
    metadata_file: str = METADATA_FILE
    state_file: str = STATE_FILE
    zmin: float = 0.0
    zmax: float = 100.0
    colorscale: str = "Greens"
    clear_policy: str = RETAIN

    def __post_init__(self):
        if self.clear_policy not in CLEAR_POLICIES:
            raise ValueError(
                f"Unknown clear_policy '{self.clear_policy}'. "
                f"Use one of {CLEAR_POLICIES}."
            )
        # YAML gives lists; keep the default pair immutable
        object.__setattr__(
            self, "default_segments",
            tuple(str(s) for s in self.default_segments),
        )

    def path_to(self, name):
        """Path of an input file ('matrix', 'metadata' or 'state')."""
        filename = {
            "matrix": self.matrix_file,
            "metadata": self.metadata_file,
            "state": self.state_file,
        }[name]
        return Path(self.data_dir) / filename

    def with_overrides(self, **overrides):
        """A copy of this config with some settings replaced."""
        return replace(self, **overrides)

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(path=None, **overrides):
    """Load a PortalConfig from a YAML file, overlaying the defaults.

    Parameters
    ----------
    path : str or Path, optional
        YAML file with a top-level mapping. If None, only defaults and
        overrides are used.
    **overrides
        Settings that take precedence over the file.

    Returns
    -------
    PortalConfig

    Raises
    ------
    FileNotFoundError
        If path is given but does not exist.
    ValueError
        If the file is not a mapping or names unknown settings.
    """
    settings = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must hold a mapping, "
                             f"got {type(loaded).__name__}")
        settings.update(loaded)
        LOG.info("Loaded config from %s: %s", path, sorted(loaded))

    settings.update(overrides)

    known = {f.name for f in fields(PortalConfig)}
    unknown = sorted(set(settings) - known)
    if unknown:
        raise ValueError(f"Unknown config settings: {unknown}. "
                         f"Available: {sorted(known)}")
    return PortalConfig(**settings)
