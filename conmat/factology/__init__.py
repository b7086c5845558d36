"""factology — Structured diagnostics.

Every measurement is a Fact: a named, described, typed value. A Factology
is a collection of Facts about a subject; JoinFacts describes how well
the edge list and the metadata table line up.
"""

from .fact import Fact, fact, annotational, connectomic
from .factology import Factology, JoinFacts
