"""
Testes dos loaders de planilha (XLSX/CSV) de movimentações e linhas de BOM.
"""

import pandas as pd

from solarstock.adapters.sheet_loader import (
    _normalize_columns,
    _slug,
    load_events_from_sheet,
    load_material_lines_from_sheet,
)


def test_slug():
    assert _slug("  Unit Price (INR) ") == "unit price inr"
    assert _slug("Sr. No") == "sr no"
    assert _slug(None) == ""


def test_normalize_columns_aliases():
    df = pd.DataFrame(columns=["Material", "Description", "Make", "Qty", "In/Out", "Vendor", "Sr. No", "Extra Col"])
    assert list(_normalize_columns(df).columns) == [
        "item", "type", "brand", "quantity", "kind", "supplier", "sr", "extra col"
    ]


def test_load_events_xlsx(tmp_path):
    path = tmp_path / "eventos.xlsx"
    pd.DataFrame(
        {
            "Item": ["Inverter", "MCB"],
            "Type": ["1 x 5 kW, 1-Phase", "32A 2 POLE"],
            "Brand": [None, "HAVELLS"],
            "Quantity": [2, 10],
            "Kind": ["in", " out "],
            "Rate": [25000, None],
            "Source": ["PO-77", None],
            "Supplier": ["Growatt", None],
            "Date": ["15/03/2024", None],
        }
    ).to_excel(path, index=False)

    rows = load_events_from_sheet(str(path))
    assert len(rows) == 2
    first, second = rows
    assert first["item"] == "Inverter"
    assert first["brand"] is None
    assert first["quantity"] == "2"
    assert first["kind"] == "IN"
    assert first["source"] == "PO-77"
    assert first["date"] == "2024-03-15"
    assert second["kind"] == "OUT"
    assert second["brand"] == "HAVELLS"
    assert second["rate"] is None
    assert second["date"] is None


def test_load_material_lines_csv(tmp_path):
    path = tmp_path / "bom.csv"
    pd.DataFrame(
        {
            "Sr": [1, 2, 3],
            "Item": ["Wires", "", "Bolt"],
            "Type": ["DC 4 sq mm", "ignored", "M10"],
            "Make": ["Polycab", "", ""],
            "Qty": ["120", "5", "AS PER REQUIREMENT"],
            "Unit": ["mtr", "", ""],
        }
    ).to_csv(path, index=False)

    rows = load_material_lines_from_sheet(str(path))
    assert [r["item"] for r in rows] == ["Wires", "Bolt"]
    assert rows[0] == {
        "sr": "1",
        "item": "Wires",
        "description": "DC 4 sq mm",
        "make": "Polycab",
        "quantity": "120",
        "unit": "mtr",
    }
    assert rows[1]["quantity"] == "AS PER REQUIREMENT"
    assert rows[1]["make"] == ""
