"""Assemble the explorer from individual views.

Usage:
    # In a notebook
    from conmat.portal.app import build_portal
    portal = build_portal(config=load_config("explorer.yaml"))
    portal.servable()

    # As a standalone app (reads CONMAT_CONFIG if set)
    panel serve conmat/portal/app.py --show
"""

import os

import panel as pn

from conmat.config import load_config
from conmat.session import Session
from conmat.utils import get_logger

LOG = get_logger("portal.app")


def build_portal(config=None, session=None, load=True):
    """Build the complete explorer application.

    Parameters
    ----------
    config : PortalConfig, optional
        Input locations, viewer target, and display settings. Ignored if
        a session is given.
    session : Session, optional
        An existing session, e.g. one fed with in-memory data.
    load : bool
        If True, load the three inputs from the config's data_dir. A
        failed input shows as an error but does not stop the others.

    Returns
    -------
    pn.Row
        Matrix, selection and metadata on the left, viewer on the right.
    """
    pn.extension("plotly", sizing_mode="stretch_width")

    from conmat.portal.views import (
        matrix_view,
        metadata_view,
        selection_view,
        status_view,
        viewer_view,
    )

    session = session or Session(config)

    left = pn.Column(
        pn.pane.Markdown("# Interactive Connectome Matrix"),
        status_view(session),
        selection_view(session),
        matrix_view(session),
        metadata_view(session),
        sizing_mode="stretch_both",
    )
    right = pn.Column(viewer_view(session), sizing_mode="stretch_both")
    portal = pn.Row(left, right, sizing_mode="stretch_both")

    if load:
        statuses = session.load_all()
        LOG.info("Inputs loaded: %s", statuses)

    LOG.info("Portal built for layer '%s'", session.config.layer_name)
    return portal


# --- Standalone entry point ---
if __name__ == "__main__" or __name__.startswith("bokeh"):
    portal = build_portal(config=load_config(os.environ.get("CONMAT_CONFIG")))
    portal.servable()
