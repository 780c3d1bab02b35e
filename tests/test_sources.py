import json
from pathlib import Path

from slip_publish.runtime_config import SourceConfig
from slip_publish.sources import (
    SOURCE_EMPTY,
    SOURCE_MISSING,
    SOURCE_OK,
    SOURCE_UNREADABLE,
    load_source,
    read_recommendation_rows,
)


def test_read_csv_rows_keeps_strings(tmp_path: Path) -> None:
    path = tmp_path / "system.csv"
    path.write_text(
        "leg_1,leg_2,leg_3,ev\n"
        "A OVER PTS 10.5 [id:1],B OVER REB 4.5,C UNDER AST 2.5,0.12\n",
        encoding="utf-8",
    )

    rows = read_recommendation_rows(path)

    assert rows == [
        {
            "leg_1": "A OVER PTS 10.5 [id:1]",
            "leg_2": "B OVER REB 4.5",
            "leg_3": "C UNDER AST 2.5",
            "ev": "0.12",
        }
    ]


def test_read_json_rows_accepts_list_or_wrapped(tmp_path: Path) -> None:
    listed = tmp_path / "a.json"
    listed.write_text(json.dumps([{"legs": "A OVER PTS 1"}, "skip"]), encoding="utf-8")
    wrapped = tmp_path / "b.json"
    wrapped.write_text(json.dumps({"slips": [{"legs": "B OVER PTS 1"}]}), encoding="utf-8")

    assert read_recommendation_rows(listed) == [{"legs": "A OVER PTS 1"}]
    assert read_recommendation_rows(wrapped) == [{"legs": "B OVER PTS 1"}]


def test_load_source_statuses(tmp_path: Path) -> None:
    missing = load_source(SourceConfig(name="system", path=tmp_path / "none.csv"))
    assert missing.status == SOURCE_MISSING
    assert not missing.available

    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    unreadable = load_source(SourceConfig(name="gamescript", path=bad))
    assert unreadable.status == SOURCE_UNREADABLE
    assert unreadable.error

    empty = tmp_path / "empty.json"
    empty.write_text("[]", encoding="utf-8")
    assert load_source(SourceConfig(name="x", path=empty)).status == SOURCE_EMPTY

    ok = tmp_path / "ok.json"
    ok.write_text(json.dumps([{"legs": "A OVER PTS 1"}]), encoding="utf-8")
    loaded = load_source(SourceConfig(name="x", path=ok, filter_cold=True))
    assert loaded.status == SOURCE_OK
    assert loaded.filter_cold is True
    assert loaded.rows == [{"legs": "A OVER PTS 1"}]
