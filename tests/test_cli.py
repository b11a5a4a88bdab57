import json

import pytest

import geoforce.__main__ as cli
from geoforce import ConfigurationError, JsonLinesSink, MapView, WebMercatorProjector

DOC = {
    "nodes": [
        {"id": 1, "lat": 15.0, "lon": 103.0, "type": "parent"},
        {"id": 2, "lat": 15.0, "lon": 103.0, "type": "child"},
        {"id": 3, "lat": 15.05, "lon": 103.1, "type": "parent"},
    ],
    "links": [{"from": 1, "to": 2}, {"from": 1, "to": 3}],
}


def _write(tmp_path, payload, name="data.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_main_writes_positions_after_zoom(tmp_path, capsys):
    data = _write(tmp_path, DOC)
    output = tmp_path / "out" / "positions.json"

    cli.main(
        [
            str(data),
            "--center",
            "15,103",
            "--zoom",
            "10",
            "--zoom-to",
            "11",
            "--max-ticks",
            "80",
            "--output",
            str(output),
        ]
    )

    printed = capsys.readouterr().out
    assert "Initial view:" in printed
    assert "Changed view:" in printed

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["view"]["zoom"] == 11
    nodes = {entry["id"]: entry for entry in payload["nodes"]}
    expected = WebMercatorProjector(MapView(15.0, 103.0, 11)).project(15.05, 103.1)
    assert (nodes[3]["x"], nodes[3]["y"]) == expected
    assert nodes[3]["anchored"] is True
    assert nodes[2]["anchored"] is False


def test_main_streams_frames(tmp_path):
    data = _write(tmp_path, DOC)
    frames = tmp_path / "frames.jsonl"

    cli.main([str(data), "--max-ticks", "10", "--frames", str(frames), "--frame-every", "5"])

    lines = frames.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["tick"] for line in lines] == [5, 10]


def test_main_reads_layout_config(tmp_path, monkeypatch):
    data = _write(tmp_path, DOC)
    config_path = _write(tmp_path, {"partition_links": True, "charge": {"enabled": False}}, "layout.json")
    created = []
    original = cli.MapLayout

    def _capture(*args, **kwargs):
        layout = original(*args, **kwargs)
        created.append(layout)
        return layout

    monkeypatch.setattr(cli, "MapLayout", _capture)
    cli.main([str(data), "--config", str(config_path), "--max-ticks", "5", "--seed", "4"])

    forces = list(created[0].simulation.forces)
    assert forces == ["link", "link:anchored", "collision", "x", "y"]
    assert created[0].config.simulation.seed == 4


def test_main_exits_on_invalid_document(tmp_path):
    data = _write(tmp_path, {"nodes": [{"id": 1}], "links": [{"from": 1, "to": 9}]})
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(data)])
    assert excinfo.value.code == 1


def test_main_exits_on_malformed_center(tmp_path):
    data = _write(tmp_path, DOC)
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(data), "--center", "north"])
    assert excinfo.value.code == 1


def test_main_leaves_no_frames_file_when_layout_fails(tmp_path):
    data = _write(tmp_path, {"nodes": [{"id": 1}], "links": [{"from": 1, "to": 9}]})
    frames = tmp_path / "frames.jsonl"
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(data), "--frames", str(frames)])
    assert excinfo.value.code == 1
    assert not frames.exists()


def test_main_exits_on_zero_frame_interval(tmp_path):
    data = _write(tmp_path, DOC)
    frames = tmp_path / "frames.jsonl"
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(data), "--frames", str(frames), "--frame-every", "0"])
    assert excinfo.value.code == 1
    assert not frames.exists()


def test_json_lines_sink_rejects_non_positive_interval(tmp_path):
    with pytest.raises(ConfigurationError, match="frame interval"):
        JsonLinesSink(tmp_path / "frames.jsonl", every=0)
