"""
Rule engine that expands a project specification into its Bill of Materials.

Given the engineering parameters of a rooftop solar project (capacity in kW,
panel wattage, phase, wire runs and structure legs) these functions size
the protection gear, cables and consumables and return the 39 ordered
material lines of a standard installation.

All functions are pure: they depend solely on their inputs and do not
modify any external state. Quantities that cannot be derived come back as
``None`` (the blank sentinel), never as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from solarstock.adapters.parsers import parse_wire_length
from solarstock.domain.models import MaterialLine, Phase, ProjectSpec, Quantity

EARTHING_WIRE_SIZE = "6 sq mm"
LA_WIRE_SIZE = "16 sq mm"
DC_WIRE_LONG_RUN_M = 50.0
EARTHING_WIRE_LONG_RUN_M = 60.0
AS_PER_DESIGN = "AS PER DESIGN"
AS_PER_REQUIREMENT = "AS PER REQUIREMENT"

BOM_LINE_COUNT = 39


@dataclass(frozen=True)
class InverterConfig:
    units: int
    each_kw: float
    desc: str


def _round_half_up(x: float, places: int) -> float:
    q = Decimal(1).scaleb(-places)
    return float(Decimal(repr(x)).quantize(q, rounding=ROUND_HALF_UP))


def round1(x: float) -> float:
    return _round_half_up(x, 1)


def round2(x: float) -> float:
    return _round_half_up(x, 2)


def format_number(x: float) -> str:
    """Render a number without a trailing ``.0`` (``4.0`` -> ``"4"``)."""
    if float(x).is_integer():
        return str(int(x))
    return repr(float(x))


def _phase_of(value) -> Optional[Phase]:
    try:
        return Phase.parse(value)
    except ValueError:
        return None


def compute_panels(kw: Optional[float], watt: Optional[float]) -> Optional[int]:
    """Number of panels needed to reach ``kw``.

    Wattages below 100 are taken as kW written as a decimal (0.55 -> 550 W).
    Returns ``None`` when either input is missing or zero.
    """
    if not kw or not watt:
        return None
    wp = watt if watt >= 100 else watt * 1000
    return math.ceil((kw * 1000) / wp)


def compute_inverter_cfg(kw: Optional[float], phase) -> InverterConfig:
    """Inverter unit count and per-unit rating.

    Three-phase plants always get a single inverter. Single-phase plants are
    split in two units from 7 kW and in three units from 13 kW.
    """
    if not kw:
        return InverterConfig(units=0, each_kw=0.0, desc="")
    if _phase_of(phase) is Phase.TRIPLE:
        return InverterConfig(1, kw, f"1 x {format_number(round1(kw))} kW, 3-Phase")
    if kw < 7:
        units = 1
    elif kw < 13:
        units = 2
    else:
        units = 3
    each = kw / units
    return InverterConfig(units, each, f"{units} x {format_number(round1(each))} kW, 1-Phase")


def compute_dcdb(kw: float) -> str:
    if kw <= 6:
        return "1 IN 1 OUT"
    if 7 <= kw <= 12:
        return "2 IN 2 OUT"
    if 13 <= kw <= 18:
        return "3 IN 3 OUT"
    if 19 <= kw <= 20:
        return "4 IN 4 OUT"
    return AS_PER_DESIGN


def compute_acdb_rating(kw: float) -> str:
    return "32A" if kw <= 5 else "63A"


def compute_mcb_elcb_amp(kw: float) -> Optional[int]:
    if kw <= 5:
        return 32
    if kw <= 15:
        return 63
    if kw <= 20:
        return 100
    return None


def pole_text(phase) -> str:
    p = _phase_of(phase)
    if p is Phase.SINGLE:
        return "2 POLE"
    if p is Phase.TRIPLE:
        return "4 POLE"
    return ""


def compute_mcb_text(kw: float, phase) -> str:
    amp = compute_mcb_elcb_amp(kw)
    poles = pole_text(phase)
    head = f"{amp}A" if amp else AS_PER_DESIGN
    return f"{head} {poles}".strip()


def select_ac_main_size(kw: float, phase) -> str:
    """AC wire size for the main run (line 13)."""
    p = _phase_of(phase)
    if p is Phase.SINGLE:
        if kw <= 3:
            return "6 sq mm Armoured"
        if 4 <= kw <= 6:
            return "10 sq mm Armoured"
        return "16 sq mm Armoured"
    if p is Phase.TRIPLE:
        if 5 <= kw <= 10:
            return "6 sq mm"
        if 11 <= kw <= 20:
            return "10 sq mm"
        return AS_PER_DESIGN
    return ""


def select_ac_inv_to_acdb(kw: float, phase) -> str:
    """AC wire from the inverter to the ACDB (line 14)."""
    p = _phase_of(phase)
    if p is Phase.SINGLE:
        return "2 CORE 6 SQ MM" if kw <= 10 else "2 CORE 10 SQ MM"
    if p is Phase.TRIPLE:
        return "4 CORE 4 SQ MM" if kw <= 10 else "4 CORE 6 SQ MM"
    return ""


def select_dc_wire_size(dc_wire_len_m: float) -> str:
    return "6 sq mm" if dc_wire_len_m > DC_WIRE_LONG_RUN_M else "4 sq mm"


def wire_tape_colors(phase) -> str:
    if _phase_of(phase) is Phase.TRIPLE:
        return "RED, BLUE, BLACK, YELLOW"
    return "RED, BLUE, GREEN"


def per_leg(qty: float, legs: Optional[int]) -> float:
    """Scale a per-leg quantity; without legs the base quantity is kept."""
    if not legs:
        return qty
    return round2(qty * legs)


def _length_or_blank(length_m: float) -> Quantity:
    return length_m if length_m else None


def generate_material_lines(spec: ProjectSpec) -> List[MaterialLine]:
    """Expand a non-custom project specification into its 39 BOM lines.

    Parameters
    ----------
    spec: ProjectSpec
        The project. Only its numeric/engineering fields are read; the
        object is never modified.

    Returns
    -------
    list of MaterialLine
        Lines with serials 1..39 in installation order.
    """
    kw = spec.capacity_kw or 0.0
    watt = spec.panel_wattage or 0.0
    phase = spec.phase
    legs = spec.legs or 0

    ac_len = parse_wire_length(spec.ac_wire)
    dc_len = parse_wire_length(spec.dc_wire)
    la_len = parse_wire_length(spec.la_wire)
    e_len = parse_wire_length(spec.earthing_wire)

    inv = compute_inverter_cfg(kw, phase)
    mcb_text = compute_mcb_text(kw, phase)

    rows: List[MaterialLine] = []

    def add(item: str, desc: str = "", make: str = "", qty: Quantity = None, unit: str = "") -> None:
        rows.append(MaterialLine(len(rows) + 1, item, desc, make, qty, unit))

    # 1-4. Geração e quadros
    add("Solar Panel", "", "", compute_panels(kw, watt), "Nos")
    add("Inverter", inv.desc, "", inv.units or None, "Nos")
    add("DCDB", compute_dcdb(kw), "ELMEX = Fuse  HAVELLS = SPD", 1, "Nos")
    add("ACDB", compute_acdb_rating(kw), "HAVELLS = MCB EL", 1, "Nos")

    # 5-12. Proteção e acessórios
    add("MCB", mcb_text, "HAVELLS", 1, "Nos")
    add("ELCB", mcb_text, "HAVELLS", 1, "Nos")
    add("Loto Box", "", "", 1, "Nos")
    add("Danger Plate", "230V", "", 1, "Nos")
    add("Fire Cylinder Co2", "1 KG", "", 1, "Nos")
    add("Copper Thimble for (ACDB)", "Pin types 6mmsq", "", 12, "Nos")
    add("Copper Thimble for ( Earthing , Inverter, Structure)", "Ring types 6mmsq", "", 6, "Nos")
    add("Copper Thimble for ( LA)", "Ring types 16mmsq", "", 2, "Nos")

    # 13-17. Cabos
    add("AC wire", select_ac_main_size(kw, phase), "Polycab", _length_or_blank(ac_len), "mtr")
    add("AC wire Inverter to ACDB", select_ac_inv_to_acdb(kw, phase), "Polycab", 2, "mtr")
    add("Dc wire Tin copper", select_dc_wire_size(dc_len), "Polycab", _length_or_blank(dc_len), "mtr")
    add("Earthing Wire", EARTHING_WIRE_SIZE, "Polycab", _length_or_blank(e_len), "mtr")
    add("LA Earthing Wire", LA_WIRE_SIZE, "Polycab", _length_or_blank(la_len), "mtr")

    # 18-35. Civil e consumíveis
    add("Earthing Pit Cover", "STANDARD", "", 3, "Nos")
    add("LA", "1 MTR", "", 1, "Nos")
    add("LA Fastner / LA", "M6", "MS", 4, "Nos")
    rod = "1 MTR" if kw <= 10 else "2 MTR"
    add("Earthing Rod/Plate", f"{rod} | COPPER COATING", "", 3, "Nos")
    add("Earthing Chemical", "CHEMICAL", "", 1 if kw <= 10 else 2, "BAG")
    add("Mc4 Connector", "1000V", "", 2, "PAIR")
    add("Cable Tie UV", "200MM", "", 0.5, "PKT")
    add("Cable Tie UV", "300MM", "", 0.5, "PKT")
    add("Screw", "1.5 INCH", "", 100, "Nos")
    add("Gitti", "1.5 INCH", "", 2, "Pkt")
    add("Wire PVC Tape", wire_tape_colors(phase), "", 3, "Nos")
    add("UPVC Pipe", "20mm", "", 0.5, "Lot")
    add("UPVC Cable Tray", "50*25", "", 1.5, "Mtr")
    add("UPVC Shedal", "20mm", "", 1, "Pkt")
    add("GI Shedal", "20mm", "", 40, "Nos")
    add("UPVC Tee Band", "20mm", "", 3, "Nos")
    add("UPVC Elbow", "20mm", "", 12 if e_len > EARTHING_WIRE_LONG_RUN_M else 6, "Nos")
    add("Flexible Pipe", "20mm", "", 5, "Mtr")

    # 36. Parafusos da estrutura: acima de 5 kW a quantidade vem do projeto
    if kw <= 5:
        add("Structure Nut Bolt", "M10*25", "", 40, "Nos")
    else:
        add("Structure Nut Bolt", "M10*25", AS_PER_REQUIREMENT, None, "")

    # 37-39. Itens por perna da estrutura
    add("Thread Rod / Fastner", "M10", "", per_leg(4, legs), "Nos")
    add("Farma", "", "", per_leg(1, legs), "Nos")
    add("Civil Material", "", "", per_leg(1.5, legs), "Nos")

    return rows
