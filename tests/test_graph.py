import pytest

from geoforce import (
    Anchored,
    ConfigurationError,
    DuplicateNodeError,
    Graph,
    GraphReferenceError,
    LinkSpec,
    Node,
    NodeKind,
)
from geoforce.graph import LINK_ANCHORED, LINK_FREE, LINK_MIXED


def _graph():
    nodes = [
        Node("p", kind=NodeKind.ANCHORED, x=0.0, y=0.0),
        Node("q", kind=NodeKind.ANCHORED, x=40.0, y=0.0),
        Node("c1"),
        Node("c2"),
    ]
    links = [
        LinkSpec("p", "q"),
        LinkSpec("p", "c1"),
        LinkSpec("c1", "c2"),
        LinkSpec("q", "c2", category="custom"),
    ]
    return Graph(nodes, links)


def test_link_endpoints_are_graph_nodes():
    graph = _graph()
    ids = {id(node) for node in graph.nodes}
    for link in graph.links:
        assert id(link.source) in ids
        assert id(link.target) in ids
        assert link.source is graph.node(link.source.id)
        assert link.target is graph.node(link.target.id)


def test_nodes_and_links_are_indexed_in_order():
    graph = _graph()
    assert [node.index for node in graph.nodes] == [0, 1, 2, 3]
    assert [link.index for link in graph.links] == [0, 1, 2, 3]


def test_link_categories_follow_endpoint_kinds():
    graph = _graph()
    assert [link.category for link in graph.links] == [LINK_ANCHORED, LINK_MIXED, LINK_FREE, "custom"]
    assert graph.links_in(LINK_ANCHORED) == [graph.links[0]]
    assert graph.categories() == ["anchored", "custom", "free", "mixed"]


def test_unresolved_links_are_all_reported():
    nodes = [Node("a"), Node("b")]
    links = [LinkSpec("a", "b"), LinkSpec("a", "zz"), LinkSpec("yy", "b")]
    with pytest.raises(GraphReferenceError) as excinfo:
        Graph(nodes, links)
    err = excinfo.value
    assert err.links == [(1, "a", "zz"), (2, "yy", "b")]
    assert isinstance(err, ConfigurationError)
    assert isinstance(err, ReferenceError)
    assert "links[1]" in str(err) and "links[2]" in str(err)


def test_duplicate_node_ids_are_rejected():
    with pytest.raises(DuplicateNodeError):
        Graph([Node(1), Node(1)])


def test_negative_radius_is_rejected():
    with pytest.raises(ConfigurationError):
        Graph([Node("a", radius=-1.0)])


def test_incident_links_and_neighbors():
    graph = _graph()
    incident = graph.incident_links("c1")
    assert [(link.source.id, link.target.id) for link in incident] == [("p", "c1"), ("c1", "c2")]
    assert [node.id for node in graph.neighbors("c2")] == ["c1", "q"]
    with pytest.raises(KeyError):
        graph.incident_links("nope")


def test_kind_partitions():
    graph = _graph()
    assert [node.id for node in graph.anchored_nodes()] == ["p", "q"]
    assert [node.id for node in graph.free_nodes()] == ["c1", "c2"]
    assert "p" in graph and "zz" not in graph
    assert len(graph) == 4


def test_pin_to_switches_placement():
    node = Node("a")
    assert not node.anchored
    node.pin_to(3, 4)
    assert node.anchored
    assert node.kind is NodeKind.ANCHORED
    assert node.placement.target_x == 3.0
    assert node.placement.target_y == 4.0


def test_anchored_kind_is_pinned_to_its_position():
    graph = _graph()
    p = graph.node("p")
    assert p.anchored
    assert p.placement == Anchored(0.0, 0.0)
    assert graph.node("q").placement == Anchored(40.0, 0.0)


def test_anchored_kind_prefers_home_point():
    node = Node("hub", kind=NodeKind.ANCHORED, geo=(0.0, 0.0), home=(100.0, 100.0), x=5.0, y=5.0)
    Graph([node])
    assert node.placement == Anchored(100.0, 100.0)


def test_anchored_kind_without_target_is_rejected():
    with pytest.raises(ConfigurationError, match="anchored node 'hub' has no target"):
        Graph([Node("hub", kind=NodeKind.ANCHORED, geo=(0.0, 0.0)), Node("leaf")], [LinkSpec("hub", "leaf")])


def test_free_kind_with_anchored_placement_is_rejected():
    node = Node("leaf", placement=Anchored(1.0, 2.0))
    with pytest.raises(ConfigurationError, match="free node 'leaf' has an anchored placement"):
        Graph([node])
