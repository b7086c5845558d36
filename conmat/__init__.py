"""conmat — Connectivity matrix explorer with Neuroglancer deep links.

Renders a "who connects to whom" matrix for a set of segments, lets the
user collect segments by clicking matrix cells, and keeps that selection
in sync with a metadata panel and a Neuroglancer state URL.

Subpackages:
    bench         Dataset descriptors and lazy loading
    connectivity  Edge list, metadata table, and the joined dataset index
    neuroglancer  Viewer-state documents and the deep-link codec
    factology     Join diagnostics as structured facts
    portal        Panel application

Modules:
    config        PortalConfig and YAML configuration
    selection     The ordered selection of segments
    session       Session context that wires the loads together
"""

__version__ = "0.1.0"
