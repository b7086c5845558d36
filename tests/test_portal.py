"""Smoke tests for the portal module.

Tests that views can be constructed and react to the session.
Does NOT test Panel rendering (requires a browser).
"""

import json

import pytest

from conmat.config import PortalConfig
from conmat.connectivity.matrix import ConnectivityMatrix
from conmat.session import Session


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def loaded_session():
    session = Session()
    session.set_edges([
        {"row": "1", "col": "2", "weight": 5},
        {"row": "1", "col": "3", "weight": 50},
    ])
    session.set_metadata([{"bodyId_post": "2", "type": "X"}])
    session.set_viewer_state({"layers": [{"name": "manc:v1.2.3", "segments": ["!2"]}]})
    return session


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / "matrix.json").write_text(json.dumps(
        [{"row": 1, "col": 2, "weight": 5}]
    ))
    (tmp_path / "cell_info.csv").write_text("bodyId_post,type\n2,X\n")
    (tmp_path / "state.json").write_text(json.dumps(
        {"layers": [{"name": "manc:v1.2.3", "segments": ["2"]}]}
    ))
    return tmp_path


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestFigures:
    def test_matrix_figure(self):
        from conmat.portal.views import matrix_figure
        matrix = ConnectivityMatrix([{"row": "1", "col": "2", "weight": 5}])
        fig = matrix_figure(matrix, PortalConfig(zmax=10))
        heatmap = fig.data[0]
        assert list(heatmap.x) == ["2"]
        assert list(heatmap.y) == ["1"]
        assert heatmap.zmax == 10
        assert fig.layout.yaxis.autorange == "reversed"

    def test_click_point(self):
        from conmat.portal.views import click_point
        assert click_point({"points": [{"x": "2", "y": "1", "z": 5}]}) == ("1", "2")
        assert click_point({"points": []}) is None
        assert click_point(None) is None

    def test_status_message(self):
        from conmat.portal.views import status_message
        session = Session()
        assert status_message(session) == "*Loading matrix...*"
        session.set_edges({"bad": "document"})
        assert status_message(session).startswith("**Error:**")


class TestViews:
    def test_matrix_view_click_adds_column(self, loaded_session):
        from conmat.portal.views import matrix_view
        view = matrix_view(loaded_session)
        view.click_data = {"points": [{"x": "3", "y": "1", "z": 50}]}
        assert loaded_session.selection.segments == ["2", "3"]

    def test_matrix_view_repeated_click_after_clear(self):
        from conmat.portal.views import matrix_view
        session = Session()
        session.set_edges([{"row": "1", "col": "2", "weight": 5}])
        view = matrix_view(session)
        click = {"points": [{"x": "2", "y": "1", "z": 5}]}

        view.click_data = dict(click)
        assert session.selection.segments == ["2"]
        session.clear()
        view.click_data = dict(click)
        assert session.selection.segments == ["2"]
        assert view.click_data is None

    def test_matrix_view_repeated_click_refocuses(self, loaded_session):
        from conmat.portal.views import matrix_view
        view = matrix_view(loaded_session)
        view.click_data = {"points": [{"x": "3", "y": "1", "z": 50}]}
        loaded_session.add("2")
        view.click_data = {"points": [{"x": "3", "y": "1", "z": 50}]}
        assert loaded_session.selection.focus == "3"

    def test_matrix_view_waits_for_edges(self):
        from conmat.portal.views import matrix_view
        session = Session()
        view = matrix_view(session)
        session.set_edges([{"row": "1", "col": "2", "weight": 5}])
        assert list(view.object.data[0].x) == ["2"]

    def test_selection_view_buttons(self, loaded_session):
        from conmat.portal.views import selection_view
        view = selection_view(loaded_session)
        label, reset_button, clear_button = view
        clear_button.clicks += 1
        assert loaded_session.selection.segments == []
        reset_button.clicks += 1
        assert loaded_session.selection.segments == ["10327", "11670"]
        assert "10327, 11670" in label.object

    def test_metadata_view(self, loaded_session):
        from conmat.portal.views import metadata_view
        view = metadata_view(loaded_session)
        assert view.visible
        loaded_session.on_cell_click("1", "3")
        assert not view.visible

    def test_viewer_view(self, loaded_session):
        from conmat.portal.views import viewer_view
        view = viewer_view(loaded_session)
        assert "neuroglancer-demo.appspot.com/#!" in view.object

    def test_viewer_view_before_state(self):
        from conmat.portal.views import viewer_view
        view = viewer_view(Session())
        assert view.object == ""


class TestApp:
    def test_build_portal_from_files(self, data_dir):
        from conmat.portal.app import build_portal
        session = Session(PortalConfig(data_dir=str(data_dir)))
        portal = build_portal(session=session)
        assert portal is not None
        assert session.is_ready()
        assert session.selection.segments == ["2"]

    def test_build_portal_no_data(self, tmp_path):
        from conmat.portal.app import build_portal
        portal = build_portal(config=PortalConfig(data_dir=str(tmp_path)))
        assert portal is not None

    def test_build_portal_without_loading(self, loaded_session):
        from conmat.portal.app import build_portal
        portal = build_portal(session=loaded_session, load=False)
        assert portal is not None
