"""Fact: the atomic unit of a diagnostic measurement.

A Fact namedtuple, the @fact decorator that wraps a method's return value
in one, and @annotational / @connectomic to tag and cache facts by
category.
"""

from collections import namedtuple
from functools import wraps


# ---------------------------------------------------------------------------
# The Fact namedtuple
# ---------------------------------------------------------------------------

class Fact(namedtuple("Fact", ["label", "name", "description", "unit", "value"])):
    """A single measurement with its metadata.

    Fields
    ------
    label : str
        Machine-readable identifier (the method name).
    name : str
        Human-readable name (e.g., "Matrix columns").
    description : str
        What was measured (from the method's docstring).
    unit : str or None
        Unit of measurement (e.g., "segments").
    value : any
        The measured value.
    """

    def __str__(self):
        unit_str = f" {self.unit}" if self.unit else ""
        return f"{self.name}: {self.value}{unit_str}"

    def to_dict(self):
        """Convert to a plain dict for serialization."""
        return {
            "label": self.label,
            "name": self.name,
            "description": self.description,
            "unit": self.unit,
            "value": self.value,
        }


# ---------------------------------------------------------------------------
# @fact(name, unit) — wrap a method's return value in a Fact
# ---------------------------------------------------------------------------

def fact(name, unit=None):
    """Decorator factory: wrap a method's return value as a Fact.

    Usage::

        @fact("Matrix columns", "segments")
        def column_count(self):
            '''Distinct pre-synaptic segments in the edge list.'''
            return len(self.index.cols)
    """
    def decorator(method):
        @wraps(method)
        def wrapper(self):
            value = method(self)
            return Fact(
                label=method.__name__,
                name=name,
                description=(method.__doc__ or "").strip(),
                unit=unit,
                value=value,
            )
        wrapper.__defines_a_fact__ = True
        wrapper._fact_name = name
        wrapper._fact_unit = unit
        return wrapper
    return decorator


# ---------------------------------------------------------------------------
# @annotational / @connectomic — tag facts by category and cache them
# ---------------------------------------------------------------------------

def _categorized(method, category):
    method.__defines_a_fact__ = True
    method.__fact_type__ = category
    return _cached_property(method)


def annotational(method):
    """Decorator: tag a fact about the metadata table, computed once."""
    return _categorized(method, "annotational")


def connectomic(method):
    """Decorator: tag a fact about the edge list, computed once."""
    return _categorized(method, "connectomic")


def _cached_property(method):
    """Turn a method into a cached accessor (computed once, then stored)."""
    attr_name = f"_cached_{method.__name__}"

    @wraps(method)
    def wrapper(self):
        if not hasattr(self, attr_name):
            setattr(self, attr_name, method(self))
        return getattr(self, attr_name)

    for attr in ('__defines_a_fact__', '__fact_type__', '_fact_name', '_fact_unit'):
        if hasattr(method, attr):
            setattr(wrapper, attr, getattr(method, attr))
    return wrapper
