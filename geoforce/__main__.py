import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from geoforce import (
    ConfigurationError,
    JsonLinesSink,
    LayoutConfig,
    MapLayout,
    MapView,
    get_layout_config,
    load_document,
)

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (15.0, 103.0)
DEFAULT_ZOOM = 10.0


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_pair(value: Optional[str], label: str, sep: str = ",") -> Optional[Tuple[float, float]]:
    if not value:
        return None
    parts = [part.strip() for part in value.split(sep) if part.strip()]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"{label} expects two numbers separated by '{sep}', got {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{label} expects numbers, got {value!r}") from exc


def _default_center(document) -> Tuple[float, float]:
    coords = [record.geo for record in document.nodes if record.geo is not None]
    if not coords:
        return DEFAULT_CENTER
    lat = sum(c[0] for c in coords) / len(coords)
    lon = sum(c[1] for c in coords) / len(coords)
    return lat, lon


def _report(layout: MapLayout, ticks: int, label: str) -> None:
    print(f"{label}:")
    print(f"  ticks: {ticks}")
    print(f"  alpha: {layout.simulation.alpha:.5f}")
    print(f"  settled: {layout.simulation.settled}")
    print("Coordinates:")
    for node in layout.graph.nodes:
        marker = " (anchored)" if node.anchored else ""
        print(f"  {node.id}: ({node.x:.3f}, {node.y:.3f}){marker}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out a node/link graph over a tiled map")
    parser.add_argument("path", help="Path to the JSON graph document")
    parser.add_argument("--center", help="Map centre as LAT,LON (default: centroid of the nodes)")
    parser.add_argument("--zoom", type=float, default=DEFAULT_ZOOM, help="Map zoom level (default: 10)")
    parser.add_argument("--size", default="800x600", help="Viewport size as WIDTHxHEIGHT (default: 800x600)")
    parser.add_argument("--config", help="JSON file with layout options")
    parser.add_argument(
        "--seed",
        type=int,
        default=123,
        help="Random seed used for coincidence jitter (default: 123)",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=1000,
        help="Upper bound on simulation steps per run (default: 1000)",
    )
    parser.add_argument(
        "--partition-links",
        action="store_true",
        help="Drive anchored-anchored links with their own link force",
    )
    parser.add_argument("--pan", help="After settling, pan the view to LAT,LON and relax again")
    parser.add_argument("--zoom-to", type=float, help="After settling, change zoom level and relax again")
    parser.add_argument("--frames", help="Write every tick as JSON lines to this path")
    parser.add_argument("--frame-every", type=int, default=1, help="Only write every N-th frame (default: 1)")
    parser.add_argument("--output", help="Write final positions as JSON to this path")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    try:
        config = LayoutConfig.from_file(args.config) if args.config else get_layout_config()
        config.simulation.seed = args.seed
        if args.partition_links:
            config.partition_links = True

        document = load_document(args.path)
        center = _parse_pair(args.center, "--center") or _default_center(document)
        size = _parse_pair(args.size, "--size", sep="x")
        pan = _parse_pair(args.pan, "--pan")
        view = MapView(center[0], center[1], args.zoom, int(size[0]), int(size[1]))  # type: ignore[index]

        layout = MapLayout(document, view, config=config)
        frame_sink: Optional[JsonLinesSink] = None
        if args.frames:
            frame_sink = JsonLinesSink(args.frames, every=args.frame_every)
            layout.simulation.add_sink(frame_sink)
    except (ConfigurationError, argparse.ArgumentTypeError) as exc:
        logger.error("%s", exc)
        raise SystemExit(1)

    try:
        ticks = layout.run(args.max_ticks)
        _report(layout, ticks, "Initial view")

        if pan is not None or args.zoom_to is not None:
            new_view = view
            if pan is not None:
                new_view = new_view.panned_to(*pan)
            if args.zoom_to is not None:
                new_view = new_view.zoomed_to(args.zoom_to)
            layout.view_changed(new_view)
            ticks = layout.run(args.max_ticks)
            _report(layout, ticks, "Changed view")
    finally:
        if frame_sink is not None:
            frame_sink.close()

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing positions to %s", output_path)
        geo = layout.geo_positions()
        payload = {
            "view": {
                "center": [layout.view.center_lat, layout.view.center_lon],
                "zoom": layout.view.zoom,
                "size": [layout.view.width, layout.view.height],
            },
            "nodes": [
                {
                    "id": node.id,
                    "x": node.x,
                    "y": node.y,
                    "lat": geo[node.id][0],
                    "lon": geo[node.id][1],
                    "anchored": node.anchored,
                }
                for node in layout.graph.nodes
            ],
        }
        output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Positions written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
