"""Example: give parent-parent links their own stiffness."""

from geoforce import LayoutConfig, LinkOptions, MapLayout, MapView, parse_document

DOCUMENT = {
    "nodes": [
        {"id": "a", "lat": 48.85, "lon": 2.35, "kind": "anchored"},
        {"id": "b", "lat": 48.86, "lon": 2.29, "kind": "anchored"},
        {"id": "a1", "lat": 48.85, "lon": 2.35, "kind": "free"},
        {"id": "a2", "lat": 48.85, "lon": 2.35, "kind": "free"},
        {"id": "b1", "lat": 48.86, "lon": 2.29, "kind": "free"},
    ],
    "links": [
        {"from": "a", "to": "b"},
        {"from": "a", "to": "a1"},
        {"from": "a", "to": "a2"},
        {"from": "b", "to": "b1"},
    ],
}


def main() -> None:
    config = LayoutConfig(partition_links=True, link=LinkOptions(distance=40.0))
    config.simulation.seed = 7
    layout = MapLayout(parse_document(DOCUMENT), MapView(48.855, 2.32, zoom=13), config=config)
    print("Forces:", ", ".join(layout.simulation.forces))
    layout.run()
    for node_id, (lat, lon) in layout.geo_positions().items():
        print(f"{node_id}: ({lat:.5f}, {lon:.5f})")


if __name__ == "__main__":
    main()
