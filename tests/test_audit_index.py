from pathlib import Path

import pytest

from slip_publish.audit_index import (
    AUDIT_EMPTY,
    AUDIT_MISSING,
    AUDIT_OK,
    AUDIT_UNREADABLE,
    AuditIndex,
    build_audit_index,
    load_audit_index,
)

HEADER = "board_player,resolved_player,last5_pts,last5_reb,last5_ast,last5_fg3m"


def _write_audit(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join([HEADER, *lines]) + "\n", encoding="utf-8")
    return path


def test_build_audit_index_parses_series() -> None:
    index = build_audit_index(
        [
            {
                "resolved_player": "Luguentz Dort",
                "last5_pts": "10|12|x|8",
                "last5_reb": "2|5|3|1|4",
                "last5_ast": "",
                "last5_fg3m": "1|2",
            }
        ]
    )

    record = index.lookup("luguentz  dort")
    assert record is not None
    assert record.points == (10.0, 12.0, 8.0)
    assert record.rebounds == (2.0, 5.0, 3.0, 1.0, 4.0)
    assert record.assists == ()
    assert record.made3s == (1.0, 2.0)
    assert index.status == AUDIT_OK
    assert len(index) == 1


def test_build_audit_index_first_row_wins() -> None:
    index = build_audit_index(
        [
            {"resolved_player": "Jaren Jackson", "last5_pts": "20|22|24"},
            {"resolved_player": "JAREN JACKSON ", "last5_pts": "1"},
        ]
    )

    record = index.lookup("Jaren Jackson")
    assert record is not None
    assert record.points == (20.0, 22.0, 24.0)
    assert len(index) == 1


def test_build_audit_index_falls_back_to_board_name_and_aliases() -> None:
    index = build_audit_index(
        [
            {"resolved_player": "", "board_player": "Herb Jones", "last5_reb": "4|5"},
            {
                "resolved_player": "Jaren Jackson Jr.",
                "board_player": "Jaren Jackson",
                "last5_pts": "18|21",
            },
            {"resolved_player": None, "board_player": "  ", "last5_pts": "9"},
        ]
    )

    assert index.lookup("Herb Jones") is not None
    board = index.lookup("Jaren Jackson")
    resolved = index.lookup("Jaren Jackson Jr.")
    assert board is not None
    assert board is resolved
    assert board.player == "Jaren Jackson Jr."
    assert len(index) == 2


def test_lookup_unknown_player_is_none() -> None:
    index = build_audit_index([{"resolved_player": "Herb Jones", "last5_reb": "4"}])
    assert index.lookup("Nobody") is None
    assert index.lookup(None) is None
    assert index.lookup("") is None
    assert "Herb Jones" in index
    assert "Nobody" not in index


def test_index_records_are_read_only() -> None:
    index = build_audit_index([{"resolved_player": "Herb Jones", "last5_reb": "4"}])
    with pytest.raises(TypeError):
        index.records["x"] = index.records["herb jones"]  # type: ignore[index]


def test_load_audit_index_reads_csv(tmp_path: Path) -> None:
    path = _write_audit(
        tmp_path / "audit.csv",
        [
            "Lu Dort,Luguentz Dort,10|12|8|9|11,2|5|3|1|4,1|1|2|0|1,1|0|2|1|3",
            "Lu Dort,Luguentz Dort,0|0|0|0|0,0|0|0|0|0,0|0|0|0|0,0|0|0|0|0",
        ],
    )

    index = load_audit_index(path)

    record = index.lookup("Lu Dort")
    assert record is not None
    assert record.rebounds == (2.0, 5.0, 3.0, 1.0, 4.0)
    assert index.summary() == {"status": AUDIT_OK, "source": str(path), "players": 1}


def test_load_audit_index_missing_file_is_empty(tmp_path: Path) -> None:
    index = load_audit_index(tmp_path / "nope.csv")
    assert index.status == AUDIT_MISSING
    assert len(index) == 0
    assert index.lookup("Luguentz Dort") is None

    assert load_audit_index(None).status == AUDIT_MISSING


def test_load_audit_index_header_only_and_unreadable(tmp_path: Path) -> None:
    header_only = _write_audit(tmp_path / "header.csv", [])
    assert load_audit_index(header_only).status == AUDIT_EMPTY

    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    assert load_audit_index(empty).status == AUDIT_UNREADABLE

    directory = tmp_path / "dir.csv"
    directory.mkdir()
    assert load_audit_index(directory).status == AUDIT_MISSING


def test_empty_index_default() -> None:
    index = AuditIndex()
    assert len(index) == 0
    assert index.lookup("anyone") is None
