import json
from pathlib import Path

import pytest

from slip_publish.cli import main
from slip_publish.runtime_config import set_current_runtime_config

AUDIT = "\n".join(
    [
        "board_player,resolved_player,last5_pts,last5_reb,last5_ast,last5_fg3m",
        "Lu Dort,Luguentz Dort,8|10|12|9|11,2|5|3|1|4,1|1|2|0|1,1|0|2|1|3",
    ]
)


@pytest.fixture(autouse=True)
def _reset_runtime_config():
    yield
    set_current_runtime_config(None)


def test_cli_without_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "slip-publish" in capsys.readouterr().out


def test_cli_leg_parse(capsys) -> None:
    code = main(["leg", "parse", "Jaren Jackson OVER PRA 22.5 (GOBLIN) [id:9805821]"])
    payload = json.loads(capsys.readouterr().out)

    assert code == 0
    assert payload["player"] == "Jaren Jackson"
    assert payload["stat"] == "PRA"
    assert payload["id"] == 9805821

    assert main(["leg", "parse", "not a leg"]) == 1


def test_cli_audit_show(tmp_path: Path, capsys) -> None:
    audit = tmp_path / "audit.csv"
    audit.write_text(AUDIT + "\n", encoding="utf-8")

    code = main(["audit", "show", "lu dort", "--audit", str(audit)])
    payload = json.loads(capsys.readouterr().out)

    assert code == 0
    assert payload["player"] == "Luguentz Dort"
    assert payload["derived"]["RA"] == [3.0, 6.0, 5.0, 1.0, 5.0]

    assert main(["audit", "show", "nobody", "--audit", str(audit)]) == 2
    assert "player not found" in capsys.readouterr().err


def test_cli_enrich_writes_output(tmp_path: Path, capsys) -> None:
    audit = tmp_path / "audit.csv"
    audit.write_text(AUDIT + "\n", encoding="utf-8")
    slips = tmp_path / "slips.csv"
    slips.write_text(
        "legs,ev\n"
        "Luguentz Dort OVER REB 2.5 [id:1]|Luguentz Dort OVER AST 0.5,0.1\n"
        "Luguentz Dort OVER PTS 25.5,0.2\n",
        encoding="utf-8",
    )
    out = tmp_path / "out.json"

    code = main(
        ["enrich", "--audit", str(audit), "--input", str(slips), "--filter-cold", "--out", str(out)]
    )
    captured = capsys.readouterr()

    assert code == 0
    assert "rows_in=2 rows_out=1" in captured.out
    payload = json.loads(out.read_text(encoding="utf-8"))
    assert [leg["last5_hits"] for leg in payload["slips"][0]["legs_detail"]] == [3, 4]


def test_cli_enrich_missing_input(tmp_path: Path, capsys) -> None:
    code = main(["enrich", "--audit", str(tmp_path / "a.csv"), "--input", str(tmp_path / "b.csv")])
    assert code == 2
    assert "missing recommendation file" in capsys.readouterr().err


def test_cli_publish_no_git(tmp_path: Path, capsys) -> None:
    (tmp_path / "audit.csv").write_text(AUDIT + "\n", encoding="utf-8")
    (tmp_path / "system.csv").write_text(
        "leg_1,leg_2,leg_3,ev\n"
        "Luguentz Dort OVER REB 2.5,Luguentz Dort OVER AST 0.5,Luguentz Dort OVER FG3M 0.5,0.1\n",
        encoding="utf-8",
    )
    config = tmp_path / "runtime.toml"
    config.write_text(
        "\n".join(
            [
                "[paths]",
                'audit_csv = "audit.csv"',
                'dashboard_dir = "site"',
                "",
                "[git]",
                "enabled = true",
                "",
                "[[sources]]",
                'name = "system"',
                'path = "system.csv"',
                "filter_cold = true",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    code = main(["--config", str(config), "publish", "--no-git", "--top-n", "5"])
    out = capsys.readouterr().out

    assert code == 0
    assert "audit_status=ok audit_players=1" in out
    assert "source=system status=ok rows_in=1 rows_dropped=0 rows_published=1" in out
    assert "git_committed" not in out
    board = json.loads((tmp_path / "site" / "data" / "slips_system.json").read_text("utf-8"))
    assert board["count"] == 1


def test_cli_publish_reports_nothing_to_publish(tmp_path: Path, capsys) -> None:
    config = tmp_path / "runtime.toml"
    config.write_text(
        '[paths]\naudit_csv = "missing.csv"\n\n[[sources]]\nname = "system"\npath = "none.csv"\n',
        encoding="utf-8",
    )

    code = main(["--config", str(config), "publish", "--no-git"])

    assert code == 2
    assert "nothing to publish" in capsys.readouterr().err
