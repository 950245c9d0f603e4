# solarstock/usecases/manage_bom.py
"""
UC: Projetos e BOMs (cadastro, geração e linhas informadas).

Projetos "Custom" não passam pelo motor de regras: suas linhas vêm de uma
planilha ou de outra fonte do usuário. Qualquer projeto pode ter linhas
editadas gravadas; quando existem, elas substituem as geradas.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List

from solarstock.adapters.parsers import parse_float
from solarstock.adapters.sheet_loader import load_material_lines_from_sheet
from solarstock.config import DB_PATH
from solarstock.domain.aggregator import lines_for_spec
from solarstock.domain.models import MaterialLine, Phase, ProjectSpec
from solarstock.infra.logger import (
    log_database_operation, log_file_operation, log_system_event, log_transaction
)
from solarstock.infra.migrations import apply_migrations
from solarstock.infra.repositories import MaterialLineRepo, SpecRepo


def validate_spec(spec: ProjectSpec) -> ProjectSpec:
    """Valida o projeto antes de gravar.

    Raises:
        ValueError: cliente vazio, fase inválida, pernas negativas ou, para
            projetos não-custom, capacidade/potência não positivas.
    """
    if not str(spec.customer or "").strip():
        raise ValueError("nome do cliente é obrigatório")
    spec.phase = Phase.parse(spec.phase)
    if spec.legs is not None and int(spec.legs) < 0:
        raise ValueError("número de pernas não pode ser negativo")
    if not spec.is_custom:
        if not spec.capacity_kw or spec.capacity_kw <= 0:
            raise ValueError("capacidade (kW) deve ser positiva")
        if not spec.panel_wattage or spec.panel_wattage <= 0:
            raise ValueError("potência do painel deve ser positiva")
    return spec


def _get_spec(spec_id: str, db_path: str) -> ProjectSpec:
    spec = SpecRepo(db_path).get(spec_id)
    if spec is None:
        raise KeyError(f"projeto não encontrado: {spec_id}")
    return spec


def run_add_spec(fields: Dict[str, Any], db_path: str = DB_PATH) -> ProjectSpec:
    """Cria e grava um projeto a partir de um dicionário de campos."""
    log_system_event("add_spec_start", {"customer": fields.get("customer")})
    try:
        apply_migrations(db_path)
        spec = ProjectSpec(
            id=fields.get("id") or uuid.uuid4().hex,
            customer=str(fields.get("customer") or "").strip(),
            capacity_kw=parse_float(fields.get("capacity_kw")),
            panel_wattage=parse_float(fields.get("panel_wattage")),
            phase=fields.get("phase") or Phase.SINGLE,
            ac_wire=fields.get("ac_wire") or "",
            dc_wire=fields.get("dc_wire") or "",
            la_wire=fields.get("la_wire") or "",
            earthing_wire=fields.get("earthing_wire") or "",
            legs=int(parse_float(fields.get("legs"), 0.0) or 0),
            table_option=fields.get("table_option") or "Standard",
            front_leg=fields.get("front_leg") or "",
            back_leg=fields.get("back_leg") or "",
            roof_design=fields.get("roof_design") or "",
            panel_name=fields.get("panel_name"),
            created_at=fields.get("created_at") or datetime.now(),
        )
        validate_spec(spec)
        SpecRepo(db_path).insert(spec)
        log_database_operation("project_spec", "INSERT", 1, id=spec.id)
    except Exception as e:
        log_transaction("add_spec", fields, error=str(e))
        raise
    log_transaction("add_spec", {"id": spec.id, "customer": spec.customer}, result="success")
    return spec


def run_list_specs(db_path: str = DB_PATH) -> List[ProjectSpec]:
    apply_migrations(db_path)
    return SpecRepo(db_path).get_all()


def run_delete_spec(spec_id: str, db_path: str = DB_PATH) -> None:
    """Remove o projeto (e suas linhas). Eventos de estoque não são tocados."""
    apply_migrations(db_path)
    if not SpecRepo(db_path).delete(spec_id):
        raise KeyError(f"projeto não encontrado: {spec_id}")
    log_database_operation("project_spec", "DELETE", 1, id=spec_id)


def run_generate_bom(spec_id: str, db_path: str = DB_PATH) -> List[MaterialLine]:
    """Linhas efetivas do projeto (informadas, se houver; senão geradas)."""
    apply_migrations(db_path)
    spec = _get_spec(spec_id, db_path)
    lines = MaterialLineRepo(db_path).get(spec_id)
    return list(lines_for_spec(spec, {spec_id: lines} if lines else None))


def _lines_from_records(records: Iterable[Dict[str, Any]]) -> List[MaterialLine]:
    out: List[MaterialLine] = []
    for i, rec in enumerate(records, start=1):
        out.append(
            MaterialLine(
                serial=i,
                item=str(rec.get("item") or "").strip(),
                description=str(rec.get("description") or "").strip(),
                make=str(rec.get("make") or "").strip(),
                quantity=rec.get("quantity"),
                unit=str(rec.get("unit") or "").strip(),
            )
        )
    return out


def run_set_lines(spec_id: str, records: Iterable[Dict[str, Any]], db_path: str = DB_PATH) -> int:
    """Grava as linhas informadas do projeto, substituindo as anteriores."""
    apply_migrations(db_path)
    _get_spec(spec_id, db_path)
    lines = _lines_from_records(records)
    n = MaterialLineRepo(db_path).replace(spec_id, lines)
    log_database_operation("material_line", "REPLACE", n, spec_id=spec_id)
    return n


def run_set_lines_from_sheet(spec_id: str, path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê uma planilha de linhas de BOM e grava para o projeto."""
    log_file_operation("import", path)
    records = load_material_lines_from_sheet(path)
    n = run_set_lines(spec_id, records, db_path=db_path)
    log_file_operation("import", path, rows_processed=n, spec_id=spec_id)
    return {"arquivo": path, "projeto": spec_id, "linhas": n}


def run_clear_lines(spec_id: str, db_path: str = DB_PATH) -> None:
    """Descarta as linhas editadas; projetos padrão voltam a usar o motor de regras."""
    apply_migrations(db_path)
    _get_spec(spec_id, db_path)
    MaterialLineRepo(db_path).clear(spec_id)
    log_database_operation("material_line", "DELETE", 0, spec_id=spec_id)
