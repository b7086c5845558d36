"""Dataset descriptors and the @evaluate_datasets decorator.

The explorer reads three independent inputs (edge list, metadata table,
viewer state). Each is described by a Dataset: a name and the loader that
turns its file into records. The .value property lazy-loads the data on
first access.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Any, Callable

from conmat.utils import get_logger

LOG = get_logger("dataset")


# ---------------------------------------------------------------------------
# Base Dataset
# ---------------------------------------------------------------------------

@dataclass
class Dataset:
    """A named, lazy-loading dataset.

    Parameters
    ----------
    name : str
        Human-readable name.
    loader : callable, optional
        Function path → data.
    description : str, optional
        What this dataset contains.
    """

    name: str
    loader: Callable = None
    description: str = None

    def load(self, path):
        """Load data from a path using this dataset's loader."""
        if self.loader is None:
            raise ValueError(f"No loader for dataset '{self.name}'")
        LOG.info("Loading dataset '%s' from %s", self.name, path)
        self._value = self.loader(Path(path))
        self._path = Path(path)
        return self._value

    @property
    def value(self):
        """Lazy access to the dataset's data.

        On first access, loads from self._path if available.
        Subsequent accesses return the cached value.
        """
        try:
            return self._value
        except AttributeError:
            pass
        try:
            path = self._path
        except AttributeError:
            raise RuntimeError(
                f"Dataset '{self.name}' has no data and no path to load from. "
                "Call .load(path) first, or create a LocalDataset with an origin."
            )
        return self.load(path)

    def with_data(self, data):
        """Attach in-memory data to this dataset. Returns self for chaining."""
        self._value = data
        return self


# ---------------------------------------------------------------------------
# LocalDataset
# ---------------------------------------------------------------------------

@dataclass
class LocalDataset(Dataset):
    """A dataset residing at a known local path.

    Parameters
    ----------
    origin : Path or str
        Where the data lives on disc.
    """

    origin: Any = None  # Path | str

    def __post_init__(self):
        if isinstance(self.origin, str):
            self.origin = Path(self.origin)
        if self.origin is not None:
            self._path = self.origin


# ---------------------------------------------------------------------------
# @evaluate_datasets — the transparent unwrapping decorator
# ---------------------------------------------------------------------------

def evaluate_datasets(method):
    """Decorator: unwrap Dataset arguments to their .value before calling.

    Any positional or keyword argument that is a Dataset is replaced by its
    .value. All other arguments pass through unchanged. This lets domain
    functions accept either raw data or Dataset objects transparently.
    """

    def _unwrap(arg):
        if isinstance(arg, Dataset):
            return arg.value
        return arg

    def wrapper(*args, **kwargs):
        unwrapped_args = tuple(_unwrap(a) for a in args)
        unwrapped_kwargs = {k: _unwrap(v) for k, v in kwargs.items()}
        return method(*unwrapped_args, **unwrapped_kwargs)

    wrapper.__name__ = method.__name__
    wrapper.__doc__ = method.__doc__
    wrapper.__wrapped__ = method
    return wrapper
