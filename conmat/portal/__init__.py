"""portal — Interactive connectivity matrix explorer.

A Panel application wiring the session to a clickable heatmap, a
selection bar with Reset and Clear, a metadata panel, and an embedded
Neuroglancer viewer that follows the selection.

Launch with:
    panel serve conmat/portal/app.py
or in a notebook:
    from conmat.portal.app import build_portal
    portal = build_portal()
    portal.servable()

Requires: panel >= 1.0
"""

from .views import (
    click_point,
    matrix_figure,
    matrix_view,
    metadata_view,
    selection_view,
    status_view,
    viewer_view,
)
from .app import build_portal
