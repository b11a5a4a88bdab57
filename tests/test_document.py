import json

import pytest

from geoforce import (
    DocumentError,
    GraphReferenceError,
    NodeKind,
    build_graph,
    load_document,
    parse_document,
)


class _TableProjector:
    def __init__(self, table):
        self.table = table

    def project(self, lat, lon):
        return self.table[(lat, lon)]


DOC = {
    "nodes": [
        {"id": 1, "lat": 15.0, "lon": 103.0, "type": "parent", "img": "a.png"},
        {"id": 2, "lat": 15.1, "lon": 103.1, "type": "child", "radius": 9, "label": "two"},
        {"id": "x", "kind": "free", "x": 5, "y": 6},
    ],
    "links": [{"from": 1, "to": 2}, {"source": 2, "target": "x"}],
}


def test_parse_document_accepts_aliases():
    document = parse_document(DOC)
    kinds = [record.kind for record in document.nodes]
    assert kinds == [NodeKind.ANCHORED, NodeKind.FREE, NodeKind.FREE]
    assert document.nodes[0].image == "a.png"
    assert document.nodes[1].extra == {"label": "two"}
    assert [(link.source, link.target) for link in document.links] == [(1, 2), (2, "x")]


@pytest.mark.parametrize(
    "node, path",
    [
        ({"lat": 1.0, "lon": 2.0}, "nodes[0].id"),
        ({"id": 1, "lat": 1.0}, "nodes[0]"),
        ({"id": 1, "lat": 95.0, "lon": 2.0}, "nodes[0].lat"),
        ({"id": 1, "lat": "north", "lon": 2.0}, "nodes[0].lat"),
        ({"id": 1, "kind": "orbiting"}, "nodes[0].kind"),
        ({"id": 1, "radius": -3}, "nodes[0].radius"),
        ({"id": 1, "kind": "anchored"}, "nodes[0]"),
        ({"id": True}, "nodes[0].id"),
    ],
)
def test_invalid_nodes_report_their_location(node, path):
    with pytest.raises(DocumentError) as excinfo:
        parse_document({"nodes": [node], "links": []})
    assert excinfo.value.path == path
    assert str(excinfo.value).startswith(f"[{path}]")


def test_duplicate_ids_are_rejected():
    with pytest.raises(DocumentError) as excinfo:
        parse_document({"nodes": [{"id": 1}, {"id": 1}]})
    assert "first at nodes[0]" in str(excinfo.value)


def test_link_without_target_is_rejected():
    with pytest.raises(DocumentError) as excinfo:
        parse_document({"nodes": [{"id": 1}], "links": [{"from": 1}]})
    assert excinfo.value.path == "links[0].to"


def test_build_graph_pins_anchored_nodes_and_sets_homes():
    projector = _TableProjector({(15.0, 103.0): (100.0, 120.0), (15.1, 103.1): (140.0, 90.0)})
    graph = build_graph(parse_document(DOC), projector, default_radius=12.0)

    anchored = graph.node(1)
    assert anchored.anchored
    assert (anchored.placement.target_x, anchored.placement.target_y) == (100.0, 120.0)
    assert (anchored.x, anchored.y) == (100.0, 120.0)
    assert anchored.radius == 12.0
    assert anchored.image == "a.png"

    child = graph.node(2)
    assert not child.anchored
    assert child.home == (140.0, 90.0)
    assert child.radius == 9.0
    assert not child.has_position

    placed = graph.node("x")
    assert placed.home is None
    assert (placed.x, placed.y) == (5.0, 6.0)


def test_build_graph_requires_projector_for_geo_nodes():
    with pytest.raises(DocumentError):
        build_graph(parse_document(DOC))


def test_build_graph_reports_unknown_endpoints():
    document = parse_document({"nodes": [{"id": "a", "x": 0, "y": 0}], "links": [{"from": "a", "to": "b"}]})
    with pytest.raises(GraphReferenceError) as excinfo:
        build_graph(document)
    assert excinfo.value.links == [(0, "a", "b")]


def test_load_document_reads_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(DOC), encoding="utf-8")
    document = load_document(path)
    assert len(document.nodes) == 3
    assert len(document.links) == 2


def test_load_document_reports_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{nodes: ", encoding="utf-8")
    with pytest.raises(DocumentError) as excinfo:
        load_document(path)
    assert "invalid JSON" in str(excinfo.value)
