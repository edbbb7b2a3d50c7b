# tests/test_watermark_store.py
import json

import pytest

from juice_monitor.categories import ALL_CATEGORIES, EventCategory
from juice_monitor.state import WatermarkStore, load_watermarks, save_watermarks
from juice_monitor.state.store import CorruptWatermarkFile, decode_watermarks, default_cursor


def test_missing_file_initializes_genesis_and_persists(tmp_path):
    path = tmp_path / "wm.json"

    wm, first_run = load_watermarks(path)

    assert first_run is True
    assert set(wm) == set(ALL_CATEGORIES)
    assert all(v == "0" for v in wm.values())
    assert path.exists()
    on_disk = json.loads(path.read_text())
    assert len(on_disk) == 22
    assert on_disk["governorProposalCreated"] == "0"


def test_missing_file_twice_without_save_is_stable(tmp_path):
    path = tmp_path / "wm.json"
    first, _ = load_watermarks(path)
    second, first_run = load_watermarks(path)
    assert first == second
    # the file written by the first load makes the second a normal load
    assert first_run is False


def test_init_mode_now_uses_current_epoch_second(tmp_path, monkeypatch):
    import juice_monitor.state.store as store_mod
    monkeypatch.setattr(store_mod.time, "time", lambda: 1700000000.7)

    wm, first_run = load_watermarks(tmp_path / "wm.json", init_mode="now")

    assert first_run is True
    assert set(wm.values()) == {"1700000000"}


def test_default_cursor():
    assert default_cursor("genesis") == "0"
    assert default_cursor("now", now=42.9) == "42"


def test_partial_file_is_filled_with_defaults(tmp_path):
    path = tmp_path / "wm.json"
    path.write_text(json.dumps({"minterApplication": "1700000000"}))

    wm, first_run = load_watermarks(path)

    assert first_run is False
    assert wm[EventCategory.MINTER_APPLICATION] == "1700000000"
    assert wm[EventCategory.EMERGENCY_STOP] == "0"
    assert len(wm) == 22


def test_future_values_are_kept_verbatim(tmp_path):
    path = tmp_path / "wm.json"
    path.write_text(json.dumps({"emergencyStop": "99999999999999999999"}))
    wm, _ = load_watermarks(path)
    assert wm[EventCategory.EMERGENCY_STOP] == "99999999999999999999"


def test_unknown_keys_are_dropped_and_ints_stringified(tmp_path):
    path = tmp_path / "wm.json"
    path.write_text(json.dumps({"somethingElse": "5", "challengeStarted": 17}))

    wm, first_run = load_watermarks(path)

    assert first_run is False
    assert "somethingElse" not in {c.value for c in wm}
    assert wm[EventCategory.CHALLENGE_STARTED] == "17"


def test_corrupt_file_is_backed_up_verbatim(tmp_path):
    path = tmp_path / "wm.json"
    path.write_bytes(b"{not json")

    wm, first_run = WatermarkStore(path).load()

    assert first_run is True
    assert all(v == "0" for v in wm.values())
    backup = tmp_path / "wm.json.bak"
    assert backup.read_bytes() == b"{not json"
    assert json.loads(path.read_text())["minterDenied"] == "0"


@pytest.mark.parametrize("raw", [b"[1, 2]", b'"0"', b'{"emergencyStop": {"x": 1}}', b'{"emergencyStop": true}'])
def test_decode_rejects_non_watermark_content(raw):
    with pytest.raises(CorruptWatermarkFile):
        decode_watermarks(raw)


def test_save_then_load_roundtrip_leaves_no_tmp(tmp_path):
    path = tmp_path / "nested" / "dir" / "wm.json"
    store = WatermarkStore(path)
    wm, _ = store.load()
    wm[EventCategory.FORCED_LIQUIDATION] = "1700000123"

    store.save(wm)

    assert not store.tmp_path.exists()
    loaded, first_run = store.load()
    assert first_run is False
    assert loaded == wm


def test_save_watermarks_helper_writes_category_order(tmp_path):
    path = tmp_path / "wm.json"
    wm = {c: str(i) for i, c in enumerate(ALL_CATEGORIES)}
    save_watermarks(path, wm)
    keys = list(json.loads(path.read_text()).keys())
    assert keys == [c.value for c in ALL_CATEGORIES]
