import json

from lumiose_map.core.annotation.state import MarkerSource, normalize_marker
from lumiose_map.core.annotation.store import dump_json


def test_dump_json_layout():
    text = dump_json({"markers": [{"id": "a", "label": "Café"}]})
    assert text.splitlines()[1] == '  "markers": ['
    assert "Café" in text


def test_marker_record_keeps_unknown_keys():
    record = {"id": "e1", "type": "elevator", "label": "Lift", "lat": 1, "lng": 2, "floor": 3}
    marker = normalize_marker(record, MarkerSource.PRESET)
    assert json.loads(dump_json(marker.to_record())) == record
