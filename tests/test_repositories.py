import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from solarstock.infra.db import StoreUnavailableError, connect
from solarstock.infra.migrations import apply_migrations
from solarstock.domain.models import Direction, MaterialLine, Phase, ProjectSpec, StockEvent
from solarstock.infra.repositories import EventRepo, MaterialLineRepo, SpecRepo


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "solar_test.sqlite")
    apply_migrations(path)
    return path


def _spec(id_="p1", **extra):
    base = dict(
        id=id_, customer="ACME", capacity_kw=5.5, panel_wattage=550, phase=Phase.TRIPLE,
        ac_wire="30m", legs=4, front_leg="1.2m", roof_design="Tin shed",
        created_at=datetime(2024, 5, 1, 10, 0, 0),
    )
    base.update(extra)
    return ProjectSpec(**base)


def test_migracoes_idempotentes(db_path):
    apply_migrations(db_path)
    with connect(db_path) as c:
        assert c.execute("PRAGMA user_version;").fetchone()[0] == 2
        cols = [r[1] for r in c.execute("PRAGMA table_info(stock_event);").fetchall()]
    assert "brand" in cols


def test_banco_inacessivel(tmp_path):
    bad = str(tmp_path / "nao" / "existe" / "x.sqlite")
    with pytest.raises(StoreUnavailableError):
        apply_migrations(bad)


class _ConexaoQuebrada:
    def __init__(self):
        self.closed = False

    def execute(self, *args):
        raise sqlite3.DatabaseError("file is not a database")

    def close(self):
        self.closed = True


def test_falha_ao_configurar_fecha_conexao(tmp_path, monkeypatch):
    abertas = []

    def _fake_connect(*args, **kwargs):
        abertas.append(_ConexaoQuebrada())
        return abertas[-1]

    monkeypatch.setattr(sqlite3, "connect", _fake_connect)
    with pytest.raises(StoreUnavailableError):
        with connect(str(tmp_path / "x.sqlite")):
            pass
    assert [c.closed for c in abertas] == [True]


def test_spec_roundtrip(db_path):
    repo = SpecRepo(db_path)
    spec = _spec()
    repo.insert(spec)
    assert repo.get("p1") == spec
    assert repo.get("nope") is None
    assert [s.id for s in repo.get_all()] == ["p1"]


def test_linhas_substituidas_e_removidas_com_projeto(db_path):
    SpecRepo(db_path).insert(_spec())
    repo = MaterialLineRepo(db_path)
    repo.replace("p1", [MaterialLine(7, "Wires", "DC", "Polycab", "120", "mtr")])
    n = repo.replace(
        "p1",
        [
            MaterialLine(1, "Wires", "DC", "Polycab", 30, "mtr"),
            MaterialLine(2, "Bolt", "M10", "", "AS PER REQUIREMENT", ""),
            MaterialLine(3, "Farma", "", "", None, ""),
        ],
    )
    assert n == 3
    lines = repo.get("p1")
    assert [ln.serial for ln in lines] == [1, 2, 3]
    assert lines[0].quantity == 30.0
    assert lines[1].quantity == "AS PER REQUIREMENT"
    assert lines[2].quantity is None

    assert SpecRepo(db_path).delete("p1") is True
    assert repo.map_by_spec() == {}
    assert SpecRepo(db_path).delete("p1") is False


def test_eventos_roundtrip_e_remocao(db_path):
    repo = EventRepo(db_path)
    ev = StockEvent(
        id="e1", timestamp=datetime(2024, 5, 2, 9, 30, 0), item="Wires", type="DC",
        quantity=10, direction=Direction.IN, brand="", rate=12.5, source="PO-1", supplier="Polycab",
    )
    repo.insert(ev)
    (got,) = repo.get_all()
    assert got.brand == "standard"
    assert got.key == ev.key
    assert got.rate == 12.5
    assert got.supplier == "Polycab"

    with pytest.raises(ValueError):
        repo.insert(ev)

    assert repo.delete("e1") is True
    assert repo.get_all() == []
    assert repo.delete("e1") is False
