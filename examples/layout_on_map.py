"""Example: settle a graph over a map view, then zoom in and relax again."""

from pathlib import Path

from geoforce import FrameRecorder, MapLayout, MapView, get_layout_config

DATA = Path(__file__).with_name("data.json")


def main() -> None:
    config = get_layout_config()
    config.simulation.seed = 123
    recorder = FrameRecorder(limit=1)
    view = MapView(15.0, 103.0, zoom=10, width=800, height=600)
    layout = MapLayout.from_file(DATA, view, config=config, sinks=[recorder])

    ticks = layout.run()
    print(f"Settled after {ticks} ticks")
    for node_id, (x, y) in layout.positions().items():
        print(f"{node_id}: ({x:.2f}, {y:.2f})")

    layout.view_changed(view.zoomed_to(11))
    ticks = layout.run()
    print(f"Re-settled after zoom in {ticks} ticks")
    for state in recorder.last.nodes:
        print(f"{state.id}: ({state.x:.2f}, {state.y:.2f}) anchored={state.anchored}")


if __name__ == "__main__":
    main()
