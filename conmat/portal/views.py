"""View-building functions for the explorer.

Each view function takes the Session and returns a Panel component that
redraws itself whenever the session changes. Views are composable and
testable independently.
"""

import html

import pandas as pd

try:
    import panel as pn
    HAS_PANEL = True
except ImportError:
    HAS_PANEL = False

try:
    import plotly.graph_objects as go
    HAS_PLOTLY = True
except ImportError:
    HAS_PLOTLY = False

from conmat.config import PortalConfig
from conmat.utils import get_logger

LOG = get_logger("portal.views")

TEXT_STYLE = {"color": "#24292f"}
MUTED_STYLE = {"color": "#57606a"}


def _require_panel():
    if not HAS_PANEL:
        raise ImportError(
            "Panel is required for the portal. Install with: pip install panel"
        )


def _empty_figure(title="No data"):
    """A placeholder plotly figure."""
    fig = go.Figure()
    fig.update_layout(title=title, width=700, height=700)
    return fig


# ---------------------------------------------------------------------------
# Matrix
# ---------------------------------------------------------------------------

def matrix_figure(matrix, config=None):
    """Heatmap of the connectivity matrix.

    Parameters
    ----------
    matrix : ConnectivityMatrix
    config : PortalConfig, optional
        Color range and colorscale.

    Returns
    -------
    go.Figure
        Columns (pre-synaptic ids) on x, rows (post-synaptic ids) on y,
        both categorical, y reversed so the first row is on top.
    """
    config = config or PortalConfig()
    fig = go.Figure(go.Heatmap(
        z=matrix.z(),
        x=matrix.cols,
        y=matrix.rows,
        zmin=config.zmin,
        zmax=config.zmax,
        colorscale=config.colorscale,
        hovertemplate="Row: %{y}<br>Col: %{x}<br>Weight: %{z}<extra></extra>",
    ))
    fig.update_layout(
        width=700,
        height=700,
        title="Click cells to add segments",
        xaxis=dict(
            title="pre-synaptic Segment ID",
            type="category",
            tickangle=-45,
        ),
        yaxis=dict(
            title="post-synaptic Segment ID",
            type="category",
            autorange="reversed",
        ),
    )
    return fig


def click_point(click_data):
    """(row, col) of the first clicked point in a plotly click event, or None."""
    if not click_data:
        return None
    points = click_data.get("points") or []
    if not points:
        return None
    point = points[0]
    if "x" not in point:
        return None
    return point.get("y"), point["x"]


def matrix_view(session):
    """The clickable heatmap. Clicks add the column's segment to the selection."""
    _require_panel()

    plot = pn.pane.Plotly(_empty_figure("Loading matrix..."),
                          sizing_mode="fixed", width=720, height=720)
    drawn = [None]

    def _on_click(event):
        clicked = click_point(event.new)
        if clicked is None:
            return
        row, col = clicked
        session.on_cell_click(row, col)
        # Cleared so a repeated click on the same cell registers again
        plot.click_data = None

    def _redraw(_session):
        if session.matrix is None or drawn[0] is session.matrix:
            return
        plot.object = matrix_figure(session.matrix, session.config)
        drawn[0] = session.matrix

    plot.param.watch(_on_click, "click_data", onlychanged=False)
    session.watch(_redraw)
    _redraw(session)
    return plot


# ---------------------------------------------------------------------------
# Selection bar
# ---------------------------------------------------------------------------

def selection_view(session):
    """Current selection, with Reset and Clear All buttons."""
    _require_panel()

    label = pn.pane.Markdown("", styles=TEXT_STYLE)
    reset_button = pn.widgets.Button(name="Reset", button_type="default")
    clear_button = pn.widgets.Button(name="Clear All", button_type="default")

    reset_button.on_click(lambda event: session.reset())
    clear_button.on_click(lambda event: session.clear())

    def _update(_session):
        label.object = f"**Selected Segments:** {session.selection.display()}"

    session.watch(_update)
    _update(session)
    return pn.Row(label, reset_button, clear_button)


# ---------------------------------------------------------------------------
# Metadata panel
# ---------------------------------------------------------------------------

def metadata_view(session):
    """Key/value table for the focused segment; hidden when there is none."""
    _require_panel()

    title = pn.pane.Markdown("", styles=TEXT_STYLE)
    table = pn.pane.DataFrame(pd.DataFrame(columns=["field", "value"]),
                              index=False, sizing_mode="stretch_width")
    panel = pn.Column(title, table, visible=False)

    def _update(_session):
        rows = session.displayed_rows()
        if not rows:
            panel.visible = False
            return
        title.object = (f"## Cell Information - Segment "
                        f"{session.displayed_metadata[session.config.key_field]}")
        table.object = pd.DataFrame(rows, columns=["field", "value"])
        panel.visible = True

    session.watch(_update)
    _update(session)
    return panel


# ---------------------------------------------------------------------------
# Viewer
# ---------------------------------------------------------------------------

def _iframe(url):
    return (f'<iframe src="{html.escape(url, quote=True)}" '
            f'style="width:100%;height:100%;border:none;" '
            f'title="Neuroglancer Viewer"></iframe>')


def viewer_view(session):
    """Embedded Neuroglancer, pointed at the deep link for the selection."""
    _require_panel()

    frame = pn.pane.HTML("", sizing_mode="stretch_both", min_height=700)

    def _update(_session):
        url = session.neuroglancer_url()
        frame.object = _iframe(url) if url else ""

    session.watch(_update)
    _update(session)
    return frame


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def status_message(session):
    """Error or loading message, or "" once everything is ready."""
    if session.error:
        return f"**Error:** {session.error}"
    if session.matrix is None:
        return "*Loading matrix...*"
    if session.viewer_state is None:
        return "*Loading Neuroglancer state...*"
    if session.metadata is None:
        return "*Loading cell info...*"
    return ""


def status_view(session):
    _require_panel()

    message = pn.pane.Markdown("", styles=MUTED_STYLE)

    def _update(_session):
        message.object = status_message(session)
        message.visible = bool(message.object)

    session.watch(_update)
    _update(session)
    return message
