import json
from pathlib import Path

from typer.testing import CliRunner

from solarstock.adapters.cli import app

runner = CliRunner()


def _db(tmp_path: Path) -> str:
    return str(tmp_path / "solar_cli.sqlite")


def _add_spec(db: str, *extra: str) -> str:
    result = runner.invoke(
        app,
        ["spec", "add", "--db", db, "--customer", "ACME", "--kw", "5", "--watt", "550", *extra],
    )
    assert result.exit_code == 0, result.output
    return result.stdout.strip().splitlines()[-1]


def test_cli_migrate(tmp_path: Path):
    result = runner.invoke(app, ["migrate", "--db", _db(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "Migrações aplicadas" in result.stdout


def test_cli_spec_add_list_bom(tmp_path: Path):
    db = _db(tmp_path)
    spec_id = _add_spec(db, "--legs", "3")

    result = runner.invoke(app, ["spec", "list", "--db", db, "--json"])
    assert result.exit_code == 0, result.output
    assert [s["id"] for s in json.loads(result.stdout)] == [spec_id]

    result = runner.invoke(app, ["spec", "bom", spec_id, "--db", db, "--json"])
    assert result.exit_code == 0, result.output
    lines = json.loads(result.stdout)
    assert len(lines) == 39
    assert lines[36]["qty"] == 12


def test_cli_spec_invalido(tmp_path: Path):
    result = runner.invoke(
        app,
        ["spec", "add", "--db", _db(tmp_path), "--customer", "ACME", "--kw", "5", "--watt", "550", "--phase", "DUAL"],
    )
    assert result.exit_code == 1


def test_cli_projeto_desconhecido(tmp_path: Path):
    result = runner.invoke(app, ["spec", "bom", "nope", "--db", _db(tmp_path)])
    assert result.exit_code == 1


def test_cli_stock_e_alerts(tmp_path: Path):
    db = _db(tmp_path)
    result = runner.invoke(app, ["stock", "in", "--db", db, "--item", "Gloves", "--type", "L", "--qty", "3"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["stock", "in", "--db", db, "--item", "Screw", "--type", "1.5 INCH", "--qty", "8"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["alerts", "--db", db, "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [(r["item"], r["status"]) for r in data] == [("Gloves", "critical"), ("Screw", "low")]

    result = runner.invoke(app, ["alerts", "--db", db, "--json", "--status", "low"])
    assert [r["item"] for r in json.loads(result.stdout)] == ["Screw"]

    result = runner.invoke(app, ["alerts", "--db", db, "--status", "bogus"])
    assert result.exit_code == 1


def test_cli_stock_list_e_delete(tmp_path: Path):
    db = _db(tmp_path)
    runner.invoke(app, ["stock", "in", "--db", db, "--item", "Wires", "--type", "DC", "--qty", "10"])
    runner.invoke(app, ["stock", "out", "--db", db, "--item", "Wires", "--type", "DC", "--qty", "4"])

    result = runner.invoke(app, ["rel", "balances", "--db", db, "--json"])
    assert json.loads(result.stdout) == [{"item": "Wires", "type": "DC", "brand": "standard", "quantity": 6.0}]

    events = json.loads(runner.invoke(app, ["stock", "list", "--db", db, "--json"]).stdout)
    assert {e["kind"] for e in events} == {"IN", "OUT"}
    out_id = next(e["id"] for e in events if e["kind"] == "OUT")

    result = runner.invoke(app, ["stock", "delete", out_id, "--db", db])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["stock", "delete", out_id, "--db", db])
    assert result.exit_code == 1


def test_cli_stock_out_do_projeto(tmp_path: Path):
    db = _db(tmp_path)
    spec_id = _add_spec(db)
    result = runner.invoke(app, ["stock-out", spec_id, "--db", db])
    assert result.exit_code == 0, result.output

    events = json.loads(runner.invoke(app, ["stock", "list", "--db", db, "--json"]).stdout)
    assert events
    assert {e["supplier"] for e in events} == {"Customer: ACME"}


def test_cli_thresholds(tmp_path: Path):
    db = _db(tmp_path)
    assert runner.invoke(app, ["migrate", "--db", db]).exit_code == 0
    result = runner.invoke(app, ["thresholds", "show", "--db", db, "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"critical": 5.0, "low": 10.0, "items": {}}

    result = runner.invoke(app, ["thresholds", "set", "--db", db, "--critical", "20"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["thresholds", "set", "--db", db, "--item", "Screw", "--critical", "50", "--low", "200"])
    assert result.exit_code == 0, result.output
    assert "Limites gravados" in result.stdout

    data = json.loads(runner.invoke(app, ["thresholds", "show", "--db", db, "--json"]).stdout)
    assert data["items"] == {"Screw": {"critical": 50.0, "low": 200.0}}

    result = runner.invoke(app, ["thresholds", "clear-item", "Screw", "--db", db])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["thresholds", "clear-item", "Screw", "--db", db])
    assert result.exit_code == 1


def test_cli_banco_inacessivel(tmp_path: Path):
    bad = str(tmp_path / "sem" / "dir.sqlite")
    result = runner.invoke(app, ["alerts", "--db", bad])
    assert result.exit_code == 2


def test_cli_leitura_de_banco_ausente(tmp_path: Path):
    db = tmp_path / "digitado_errado.sqlite"
    for args in (["alerts"], ["rel", "balances"], ["rel", "requirements"], ["thresholds", "show"]):
        result = runner.invoke(app, [*args, "--db", str(db)])
        assert result.exit_code == 2, args
    assert not db.exists()
