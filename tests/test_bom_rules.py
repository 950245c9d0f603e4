from copy import deepcopy

import pytest

from solarstock.domain.bom_rules import (
    AS_PER_DESIGN,
    AS_PER_REQUIREMENT,
    BOM_LINE_COUNT,
    compute_acdb_rating,
    compute_dcdb,
    compute_inverter_cfg,
    compute_mcb_text,
    compute_panels,
    format_number,
    generate_material_lines,
    per_leg,
    round2,
    select_ac_inv_to_acdb,
    select_ac_main_size,
    select_dc_wire_size,
    wire_tape_colors,
)
from solarstock.domain.models import Phase, ProjectSpec


def _spec(kw=5.0, watt=550.0, phase=Phase.SINGLE, **kw_extra):
    return ProjectSpec(id="p1", customer="ACME", capacity_kw=kw, panel_wattage=watt, phase=phase, **kw_extra)


def _line(lines, serial):
    return lines[serial - 1]


@pytest.mark.parametrize("phase", [Phase.SINGLE, Phase.TRIPLE])
@pytest.mark.parametrize("kw", [0, 0.5, 1, 3, 4, 5, 5.5, 6, 6.5, 7, 10, 12, 12.5, 13, 15, 18, 19, 20])
def test_sempre_39_linhas_sem_lacunas(kw, phase):
    lines = generate_material_lines(_spec(kw=kw, phase=phase))
    assert len(lines) == BOM_LINE_COUNT
    assert [ln.serial for ln in lines] == list(range(1, 40))


def test_cenario_a_5_5_kw_monofasico():
    lines = generate_material_lines(_spec(kw=5.5, watt=550))
    assert _line(lines, 1).item == "Solar Panel"
    assert _line(lines, 1).quantity == 10
    assert _line(lines, 2).description == "1 x 5.5 kW, 1-Phase"
    assert _line(lines, 2).quantity == 1
    assert _line(lines, 3).description == "1 IN 1 OUT"
    assert _line(lines, 4).description == "63A"
    assert _line(lines, 5).description == "63A 2 POLE"
    assert _line(lines, 6).description == "63A 2 POLE"


def test_cenario_b_8_kw_dois_inversores():
    cfg = compute_inverter_cfg(8, Phase.SINGLE)
    assert cfg.units == 2
    assert cfg.each_kw == 4.0
    assert cfg.desc == "2 x 4 kW, 1-Phase"


def test_cenario_e_pernas_zero_usa_quantidade_base():
    lines = generate_material_lines(_spec(legs=0))
    assert _line(lines, 37).quantity == 4
    assert _line(lines, 38).quantity == 1
    assert _line(lines, 39).quantity == 1.5


def test_itens_por_perna_escalados():
    lines = generate_material_lines(_spec(legs=6))
    assert _line(lines, 37).quantity == 24
    assert _line(lines, 38).quantity == 6
    assert _line(lines, 39).quantity == 9


def test_per_leg_arredonda_duas_casas():
    assert per_leg(1.5, 3) == 4.5
    assert per_leg(4, None) == 4
    assert round2(1.005) == 1.01


def test_funcao_pura():
    spec = _spec(kw=9, legs=4, ac_wire="30m", dc_wire="55 mtr")
    before = deepcopy(spec)
    first = generate_material_lines(spec)
    second = generate_material_lines(spec)
    assert first == second
    assert spec == before


@pytest.mark.parametrize(
    "kw,watt,expected",
    [
        (5.5, 550, 10),
        (5, 540, 10),
        (3, 0.55, 6),  # kW escrito como decimal
        (None, 550, None),
        (5, None, None),
        (0, 550, None),
    ],
)
def test_compute_panels(kw, watt, expected):
    assert compute_panels(kw, watt) == expected


def test_painel_em_branco_quando_potencia_ausente():
    lines = generate_material_lines(_spec(watt=None))
    assert _line(lines, 1).quantity is None


@pytest.mark.parametrize(
    "kw,phase,units,desc",
    [
        (5, Phase.SINGLE, 1, "1 x 5 kW, 1-Phase"),
        (6.9, Phase.SINGLE, 1, "1 x 6.9 kW, 1-Phase"),
        (7, Phase.SINGLE, 2, "2 x 3.5 kW, 1-Phase"),
        (13, Phase.SINGLE, 3, "3 x 4.3 kW, 1-Phase"),
        (20, Phase.SINGLE, 3, "3 x 6.7 kW, 1-Phase"),
        (15, Phase.TRIPLE, 1, "1 x 15 kW, 3-Phase"),
    ],
)
def test_compute_inverter_cfg(kw, phase, units, desc):
    cfg = compute_inverter_cfg(kw, phase)
    assert cfg.units == units
    assert cfg.desc == desc


def test_inversor_sem_capacidade_fica_em_branco():
    lines = generate_material_lines(_spec(kw=0))
    assert _line(lines, 2).quantity is None
    assert _line(lines, 2).description == ""


@pytest.mark.parametrize(
    "kw,expected",
    [
        (0, "1 IN 1 OUT"),
        (6, "1 IN 1 OUT"),
        (6.5, AS_PER_DESIGN),
        (7, "2 IN 2 OUT"),
        (12, "2 IN 2 OUT"),
        (13, "3 IN 3 OUT"),
        (18, "3 IN 3 OUT"),
        (19, "4 IN 4 OUT"),
        (20, "4 IN 4 OUT"),
        (21, AS_PER_DESIGN),
    ],
)
def test_compute_dcdb(kw, expected):
    assert compute_dcdb(kw) == expected


@pytest.mark.parametrize("kw,expected", [(3, "32A"), (5, "32A"), (5.1, "63A"), (20, "63A")])
def test_compute_acdb_rating(kw, expected):
    assert compute_acdb_rating(kw) == expected


@pytest.mark.parametrize(
    "kw,phase,expected",
    [
        (5, Phase.SINGLE, "32A 2 POLE"),
        (5.5, Phase.SINGLE, "63A 2 POLE"),
        (15, Phase.TRIPLE, "63A 4 POLE"),
        (16, Phase.TRIPLE, "100A 4 POLE"),
        (20, Phase.SINGLE, "100A 2 POLE"),
        (25, Phase.TRIPLE, f"{AS_PER_DESIGN} 4 POLE"),
    ],
)
def test_compute_mcb_text(kw, phase, expected):
    assert compute_mcb_text(kw, phase) == expected


@pytest.mark.parametrize(
    "kw,phase,expected",
    [
        (3, Phase.SINGLE, "6 sq mm Armoured"),
        (4, Phase.SINGLE, "10 sq mm Armoured"),
        (6, Phase.SINGLE, "10 sq mm Armoured"),
        (7, Phase.SINGLE, "16 sq mm Armoured"),
        (4, Phase.TRIPLE, AS_PER_DESIGN),
        (5, Phase.TRIPLE, "6 sq mm"),
        (10, Phase.TRIPLE, "6 sq mm"),
        (11, Phase.TRIPLE, "10 sq mm"),
        (20, Phase.TRIPLE, "10 sq mm"),
        (21, Phase.TRIPLE, AS_PER_DESIGN),
    ],
)
def test_select_ac_main_size(kw, phase, expected):
    assert select_ac_main_size(kw, phase) == expected


@pytest.mark.parametrize(
    "kw,phase,expected",
    [
        (10, Phase.SINGLE, "2 CORE 6 SQ MM"),
        (11, Phase.SINGLE, "2 CORE 10 SQ MM"),
        (10, Phase.TRIPLE, "4 CORE 4 SQ MM"),
        (11, Phase.TRIPLE, "4 CORE 6 SQ MM"),
    ],
)
def test_select_ac_inv_to_acdb(kw, phase, expected):
    assert select_ac_inv_to_acdb(kw, phase) == expected


def test_cabo_dc_acima_de_50_metros():
    assert select_dc_wire_size(50) == "4 sq mm"
    assert select_dc_wire_size(50.5) == "6 sq mm"
    lines = generate_material_lines(_spec(dc_wire="approx 60 mtr"))
    assert _line(lines, 15).description == "6 sq mm"
    assert _line(lines, 15).quantity == 60.0


def test_comprimentos_de_cabo_em_branco():
    lines = generate_material_lines(_spec(ac_wire="N/A"))
    assert _line(lines, 13).quantity is None
    assert _line(lines, 15).quantity is None
    assert _line(lines, 16).quantity is None
    assert _line(lines, 17).quantity is None


def test_fitas_por_fase():
    assert wire_tape_colors(Phase.TRIPLE) == "RED, BLUE, BLACK, YELLOW"
    assert wire_tape_colors(Phase.SINGLE) == "RED, BLUE, GREEN"


def test_cotovelos_dependem_do_aterramento():
    assert _line(generate_material_lines(_spec(earthing_wire="61m")), 34).quantity == 12
    assert _line(generate_material_lines(_spec(earthing_wire="60m")), 34).quantity == 6


def test_parafusos_da_estrutura_ate_5_kw():
    line = _line(generate_material_lines(_spec(kw=5)), 36)
    assert line.item == "Structure Nut Bolt"
    assert line.quantity == 40
    assert line.make == ""


def test_parafusos_da_estrutura_acima_de_5_kw():
    line = _line(generate_material_lines(_spec(kw=5.5)), 36)
    assert line.quantity is None
    assert line.make == AS_PER_REQUIREMENT


def test_haste_e_quimico_por_capacidade():
    small = generate_material_lines(_spec(kw=10))
    big = generate_material_lines(_spec(kw=11))
    assert _line(small, 21).description == "1 MTR | COPPER COATING"
    assert _line(big, 21).description == "2 MTR | COPPER COATING"
    assert _line(small, 22).quantity == 1
    assert _line(big, 22).quantity == 2


def test_format_number():
    assert format_number(4.0) == "4"
    assert format_number(4.5) == "4.5"
