from solarstock.domain.aggregator import aggregate_requirements, lines_for_spec, merge_requirements
from solarstock.domain.bom_rules import generate_material_lines
from solarstock.domain.models import MaterialLine, Phase, ProjectSpec, StockKey


def _spec(id_, customer, kw=5.0, table="Standard", legs=0):
    return ProjectSpec(
        id=id_, customer=customer, capacity_kw=kw, panel_wattage=550,
        phase=Phase.SINGLE, table_option=table, legs=legs,
    )


def _totals(agg):
    return {k: (round(v.total, 9), frozenset(v.consumers)) for k, v in agg.items()}


def test_soma_por_chave_e_clientes_sem_repeticao():
    specs = [_spec("a", "ACME"), _spec("b", "ACME"), _spec("c", "Beta")]
    agg = aggregate_requirements(specs)
    mc4 = agg[StockKey("Mc4 Connector", "1000V")]
    assert mc4.total == 6
    assert mc4.consumers == {"ACME", "Beta"}


def test_linha_sem_tipo_e_ignorada():
    agg = aggregate_requirements([_spec("a", "ACME")])
    # Solar Panel, Loto Box, Farma e Civil Material não têm tipo
    assert not any(k.item in {"Solar Panel", "Loto Box", "Farma", "Civil Material"} for k in agg)
    assert StockKey("DCDB", "1 IN 1 OUT", "ELMEX = Fuse  HAVELLS = SPD") in agg


def test_quantidade_em_branco_nao_soma():
    # acima de 5 kW os parafusos da estrutura ficam em branco
    agg = aggregate_requirements([_spec("a", "ACME", kw=8)])
    key = StockKey("Structure Nut Bolt", "M10*25", "AS PER REQUIREMENT")
    assert agg[key].total == 0
    assert agg[key].consumers == {"ACME"}


def test_aditividade_por_particao():
    specs = [_spec("a", "ACME", kw=3), _spec("b", "Beta", kw=8, legs=4), _spec("c", "Gama", kw=14)]
    full = aggregate_requirements(specs)
    merged = merge_requirements(aggregate_requirements(specs[:1]), aggregate_requirements(specs[1:]))
    assert _totals(full) == _totals(merged)


def test_custom_sem_linhas_nao_contribui():
    custom = _spec("x", "ACME", table="Custom")
    assert list(lines_for_spec(custom)) == []
    assert aggregate_requirements([custom]) == {}


def test_linhas_informadas_substituem_as_geradas():
    custom = _spec("x", "ACME", table="Custom")
    std = _spec("y", "Beta")
    source = {
        "x": [
            MaterialLine(1, "Wires", "DC 4 sq mm", "Polycab", "120", "mtr"),
            MaterialLine(2, "Wires", "DC 4 sq mm", "Polycab", 30, "mtr"),
            MaterialLine(3, "Notes", "", "", "n/a", ""),
        ],
        "y": [MaterialLine(1, "Inverter", "1 x 5 kW, 1-Phase", "", 1, "Nos")],
    }
    agg = aggregate_requirements([custom, std], source)
    assert set(agg) == {
        StockKey("Wires", "DC 4 sq mm", "Polycab"),
        StockKey("Inverter", "1 x 5 kW, 1-Phase"),
    }
    assert agg[StockKey("Wires", "DC 4 sq mm", "Polycab")].total == 150
    assert lines_for_spec(std) == generate_material_lines(std)


def test_quantidade_negativa_nao_abate_outros_clientes():
    acme = _spec("a", "ACME", table="Custom")
    beta = _spec("b", "Beta", table="Custom")
    source = {
        "a": [MaterialLine(1, "Wires", "DC", "", "30", "mtr")],
        "b": [MaterialLine(1, "Wires", "DC", "", "-30", "mtr")],
    }
    agg = aggregate_requirements([acme, beta], source)
    wires = agg[StockKey("Wires", "DC")]
    assert wires.total == 30
    assert wires.consumers == {"ACME", "Beta"}
