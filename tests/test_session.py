"""Tests for the session: load orderings, failures, and end-to-end scenarios."""

import itertools
import json

import pytest

from conmat.config import PortalConfig
from conmat.connectivity.segments import strip_sentinel
from conmat.neuroglancer.link import decode_url
from conmat.neuroglancer.state import find_layer
from conmat.session import EDGES, METADATA, STATE, INPUTS, LoadStatus, Session


# ---------------------------------------------------------------------------
# Fixtures: the three inputs of Scenario A
# ---------------------------------------------------------------------------

@pytest.fixture
def edges():
    return [{"row": "1", "col": "2", "weight": 5}]


@pytest.fixture
def metadata():
    return [{"bodyId_post": "2", "type": "X"}]


@pytest.fixture
def state():
    return {"layers": [{"type": "segmentation", "name": "manc:v1.2.3",
                        "segments": ["!2"]}]}


@pytest.fixture
def data_dir(tmp_path, edges, metadata, state):
    (tmp_path / "matrix.json").write_text(json.dumps(edges))
    (tmp_path / "cell_info.csv").write_text("bodyId_post,type\n2,X\n")
    (tmp_path / "state.json").write_text(json.dumps(state))
    return tmp_path


def _provide(session, name, edges, metadata, state):
    {
        EDGES: lambda: session.set_edges(edges),
        METADATA: lambda: session.set_metadata(metadata),
        STATE: lambda: session.set_viewer_state(state),
    }[name]()


def _decoded_segments(session):
    doc = decode_url(session.neuroglancer_url())
    return find_layer(doc, session.config.layer_name)["segments"]


# ---------------------------------------------------------------------------
# Load orderings
# ---------------------------------------------------------------------------

class TestLoadOrder:
    @pytest.mark.parametrize("order", list(itertools.permutations(INPUTS)))
    def test_any_order_reaches_the_same_state(self, order, edges, metadata, state):
        session = Session()
        for name in order:
            _provide(session, name, edges, metadata, state)

        assert session.is_ready()
        assert session.selection.segments == ["2"]
        assert session.displayed_metadata == {"bodyId_post": "2", "type": "X"}
        assert session.index is not None
        assert _decoded_segments(session) == ["!2"]

    def test_pending_inputs(self):
        session = Session()
        assert all(s is LoadStatus.PENDING for s in session.status.values())
        assert session.neuroglancer_url() == ""
        assert session.displayed_metadata is None
        assert session.selection.segments == ["10327", "11670"]

    def test_metadata_after_state_fills_panel(self, metadata, state):
        session = Session()
        session.set_viewer_state(state)
        assert session.displayed_metadata is None
        session.set_metadata(metadata)
        assert session.displayed_metadata["type"] == "X"

    def test_state_without_record_keeps_clicked_panel(self, edges, metadata):
        session = Session()
        session.set_edges(edges)
        session.set_metadata(metadata)
        session.on_cell_click("1", "2")
        session.set_viewer_state(
            {"layers": [{"name": "manc:v1.2.3", "segments": ["!77"]}]})
        assert session.selection.segments == ["77"]
        assert session.selection.focus == "2"
        assert session.displayed_metadata["type"] == "X"

    def test_click_before_metadata_wins_over_seed(self, metadata, state):
        session = Session()
        session.set_viewer_state(state)
        session.add("5")
        session.set_metadata(metadata)
        assert session.selection.focus == "5"
        assert session.displayed_metadata is None

    def test_index_needs_edges_and_metadata(self, edges, metadata):
        session = Session()
        session.set_edges(edges)
        assert session.index is None
        session.set_metadata(metadata)
        assert session.index.metadata_for("2")["type"] == "X"

    def test_seeding_runs_once(self, state):
        session = Session()
        session.set_viewer_state(state)
        session.add("7")
        session.set_viewer_state(state)
        assert session.selection.segments == ["2", "7"]

    def test_join_diagnostics_reported_once(self, edges, metadata, monkeypatch):
        from conmat.factology import JoinFacts
        calls = []
        collect = JoinFacts.collect

        def counting_collect(facts, *args, **kwargs):
            calls.append(facts.index)
            return collect(facts, *args, **kwargs)

        monkeypatch.setattr(JoinFacts, "collect", counting_collect)
        session = Session()
        session.set_edges(edges)
        session.set_metadata(metadata)
        session.add("7")
        assert calls == [session.index]

    def test_watchers_notified(self, edges):
        session = Session()
        seen = []
        session.watch(lambda s: seen.append(s.is_ready(EDGES)))
        session.set_edges(edges)
        session.clear()
        assert seen == [True, True]


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_bad_edges_do_not_block_metadata_or_link(self, metadata, state):
        session = Session()
        session.set_edges([{"row": 1}])
        session.set_metadata(metadata)
        session.set_viewer_state(state)

        assert session.status[EDGES] is LoadStatus.FAILED
        assert "edges" in session.error
        assert session.index is None
        assert session.displayed_metadata["type"] == "X"
        assert _decoded_segments(session) == ["!2"]

    def test_missing_file_fails_one_input(self, data_dir):
        (data_dir / "cell_info.csv").unlink()
        session = Session(PortalConfig(data_dir=str(data_dir)))
        result = session.load_all()

        assert result == {EDGES: True, METADATA: False, STATE: True}
        assert session.status[METADATA] is LoadStatus.FAILED
        assert session.matrix is not None
        assert session.selection.segments == ["2"]

    def test_state_without_layers_fails(self):
        session = Session()
        assert not session.set_viewer_state({"layout": "3d"})
        assert session.status[STATE] is LoadStatus.FAILED
        assert session.neuroglancer_url() == ""

    def test_state_with_nan_fails(self):
        session = Session()
        assert not session.set_viewer_state(
            {"layers": [], "position": [float("nan"), 0, 0]})
        assert session.status[STATE] is LoadStatus.FAILED
        assert session.neuroglancer_url() == ""

    def test_missing_layer_still_links(self, edges):
        session = Session()
        session.set_viewer_state({"layers": [{"name": "other", "segments": ["!1"]}]})
        assert session.selection.segments == ["10327", "11670"]
        doc = decode_url(session.neuroglancer_url())
        assert doc["layers"] == [{"name": "other", "segments": ["!1"]}]

    def test_clean_session_has_no_error(self):
        assert Session().error is None


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_scenario_a_from_files(self, data_dir):
        session = Session(PortalConfig(data_dir=str(data_dir)))
        assert session.load_all() == {EDGES: True, METADATA: True, STATE: True}

        assert session.selection.segments == ["2"]
        assert session.displayed_metadata == {"bodyId_post": "2", "type": "X"}
        assert _decoded_segments(session) == ["!2"]

    def test_scenario_b_clear(self, edges, metadata, state):
        session = Session()
        session.set_viewer_state(state)
        session.add("3")
        session.clear()

        assert session.selection.segments == []
        layer = find_layer(decode_url(session.neuroglancer_url()), "manc:v1.2.3")
        assert layer["segments"] == []
        assert "segmentQuery" not in layer

    def test_scenario_c_click_without_metadata(self, edges, metadata, state):
        session = Session()
        for name in INPUTS:
            _provide(session, name, edges, metadata, state)
        session.on_cell_click("1", "99")

        assert "99" in session.selection
        assert session.displayed_metadata is None
        assert session.displayed_rows() == []

    def test_scenario_d_reset(self, state):
        session = Session()
        session.set_viewer_state(state)
        session.add("5")
        session.reset()
        assert session.selection.segments == ["10327", "11670"]
        session.clear()
        session.reset()
        assert session.selection.segments == ["10327", "11670"]

    def test_click_selects_column(self, edges, metadata, state):
        session = Session()
        for name in INPUTS:
            _provide(session, name, edges, metadata, state)
        session.clear()
        session.on_cell_click("1", "2")
        assert session.selection.segments == ["2"]
        assert [strip_sentinel(s) for s in _decoded_segments(session)] == ["2"]

    def test_clear_retains_panel(self, edges, metadata, state):
        session = Session()
        for name in INPUTS:
            _provide(session, name, edges, metadata, state)
        session.clear()
        assert session.displayed_metadata["type"] == "X"

    def test_clear_reset_policy(self, edges, metadata, state):
        session = Session(PortalConfig(clear_policy="reset"))
        for name in INPUTS:
            _provide(session, name, edges, metadata, state)
        session.clear()
        assert session.displayed_metadata is None
