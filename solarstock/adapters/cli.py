# solarstock/adapters/cli.py
"""
CLI do estoque solar (Typer).

Comandos principais:
- migrate                          -> aplica migrações
- spec add/list/delete/bom/lines   -> projetos e BOMs
- stock in/out/delete/import/list  -> livro de estoque
- stock-out <spec_id>              -> baixa a BOM de um projeto
- thresholds show/set/clear-item   -> limites de alerta
- alerts                           -> faltas e estoque baixo
- rel balances/requirements        -> relatórios
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from solarstock.config import DB_PATH, DEFAULTS, LOG_DIR
from solarstock.domain.models import ShortageStatus
from solarstock.domain.policies import summarize
from solarstock.domain.thresholds import ThresholdConfig
from solarstock.infra.db import StoreUnavailableError, require_existing
from solarstock.infra.logger import enable_logging, logging_requested
from solarstock.infra.migrations import apply_migrations
from solarstock.infra.repositories import ThresholdRepo
from solarstock.usecases.check_stock import load_snapshot, run_check_stock, shortages_from_snapshot
from solarstock.usecases.consume_bom import run_bom_stock_out
from solarstock.usecases.manage_bom import (
    run_add_spec,
    run_clear_lines,
    run_delete_spec,
    run_generate_bom,
    run_list_specs,
    run_set_lines_from_sheet,
)
from solarstock.usecases.register_events import (
    run_delete_event,
    run_events_from_sheet,
    run_list_events,
    run_stock_in,
    run_stock_out,
)
from solarstock.usecases.reports import relatorio_necessidades, relatorio_saldos


app = typer.Typer(help="Estoque Solar — CLI")
console = Console()

DB_OPTION_HELP = "Caminho do SQLite"

_STATUS_STYLE = {
    ShortageStatus.MISSING.value: "bold red",
    ShortageStatus.INSUFFICIENT.value: "red",
    ShortageStatus.CRITICAL.value: "bold yellow",
    ShortageStatus.LOW.value: "yellow",
}


@app.callback()
def _root(
    log: bool = typer.Option(False, "--log", help=f"Grava logs em arquivo ({LOG_DIR})"),
):
    """Estoque de materiais para projetos solares."""
    if log or logging_requested():
        enable_logging()


# -----------------------
# util
# -----------------------

def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=str))


def _fmt(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, bool):
        return str(val)
    if isinstance(val, (int, float)):
        return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    if isinstance(val, datetime):
        return val.strftime("%d/%m/%Y %H:%M")
    return str(val)


def _display_table(data: Dict[str, Any] | List[Dict[str, Any]], title: str = "Resultado") -> None:
    """Exibe os dados em tabelas formatadas usando Rich."""
    if not data:
        console.print(Panel("Nenhum dado encontrado", title=title, border_style="yellow"))
        return

    if isinstance(data, list) and isinstance(data[0], dict):
        table = Table(title=title, box=box.ROUNDED)
        columns = list(data[0].keys())
        for column in columns:
            justify = "right" if isinstance(data[0].get(column), (int, float)) else "left"
            table.add_column(column, justify=justify)
        for row in data:
            values = []
            for col in columns:
                val = row.get(col, "")
                if col == "status" and str(val) in _STATUS_STYLE:
                    values.append(f"[{_STATUS_STYLE[str(val)]}]{val}[/]")
                elif isinstance(val, list):
                    values.append(", ".join(str(v) for v in val))
                else:
                    values.append(_fmt(val))
            table.add_row(*values)
        console.print(table)
        return

    # importações em lote
    if isinstance(data, dict) and "erros" in data and "total" in data:
        titulo = f"{data.get('tipo', 'Registros')} em Lote"
        linhas = [
            f"Arquivo: {data.get('arquivo', '')}",
            f"Total de registros: {data['total']}",
            f"Processados com sucesso: {data.get('sucessos', 0)}",
        ]
        if data["erros"]:
            linhas.append(f"Erros: {len(data['erros'])}")
        console.print(Panel("\n".join(linhas), title=titulo))
        if data["erros"]:
            erro_table = Table(title="Erros Encontrados")
            erro_table.add_column("Linha")
            erro_table.add_column("Erro")
            for erro in data["erros"]:
                erro_table.add_row(str(erro.get("linha", "?")), erro.get("mensagem", "Erro desconhecido"))
            console.print(erro_table)
        return

    if isinstance(data, dict):
        table = Table(title=title, box=box.ROUNDED)
        table.add_column("Campo")
        table.add_column("Valor")
        for chave, valor in data.items():
            table.add_row(str(chave), _fmt(valor))
        console.print(table)
        return

    _print_json(data)


@contextmanager
def _erros():
    """Traduz erros dos casos de uso em mensagem + código de saída."""
    try:
        yield
    except StoreUnavailableError as e:
        typer.echo(f"Erro: banco indisponível ({e})", err=True)
        raise typer.Exit(code=2)
    except KeyError as e:
        typer.echo(f"Erro: {e.args[0] if e.args else e}", err=True)
        raise typer.Exit(code=1)
    except ValueError as e:
        typer.echo(f"Erro: {e}", err=True)
        raise typer.Exit(code=1)


def _spec_row(spec) -> Dict[str, Any]:
    return {
        "id": spec.id,
        "customer": spec.customer,
        "kw": spec.capacity_kw,
        "watt": spec.panel_wattage,
        "phase": spec.phase.value,
        "table": spec.table_option,
        "legs": spec.legs,
        "created_at": spec.created_at,
    }


def _line_row(line) -> Dict[str, Any]:
    return {
        "sr": line.serial,
        "item": line.item,
        "description": line.description,
        "make": line.make,
        "qty": "" if line.quantity is None else line.quantity,
        "unit": line.unit,
    }


def _event_row(ev) -> Dict[str, Any]:
    return {
        "id": ev.id,
        "timestamp": ev.timestamp,
        "item": ev.item,
        "type": ev.type,
        "brand": ev.brand,
        "kind": ev.direction.value,
        "quantity": ev.quantity,
        "rate": ev.rate,
        "source": ev.source,
        "supplier": ev.supplier,
    }


# -----------------------
# comandos de infra
# -----------------------

@app.command("migrate")
def cmd_migrate(db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP)):
    """Aplica migrações no banco."""
    with _erros():
        version = apply_migrations(db_path)
    typer.echo(f">> Migrações aplicadas em: {db_path} (schema v{version})")


# -----------------------
# projetos / BOM
# -----------------------

spec_app = typer.Typer(help="Projetos (especificações) e BOMs.")
app.add_typer(spec_app, name="spec")


@spec_app.command("add")
def cmd_spec_add(
    customer: str = typer.Option(..., "--customer", help="Nome do cliente"),
    kw: Optional[float] = typer.Option(None, "--kw", help="Capacidade do sistema em kW"),
    watt: Optional[float] = typer.Option(None, "--watt", help="Potência do painel (W)"),
    phase: str = typer.Option("SINGLE", "--phase", help="SINGLE | TRIPLE"),
    ac_wire: str = typer.Option("", "--ac-wire", help="Comprimento do cabo AC (ex.: '30m')"),
    dc_wire: str = typer.Option("", "--dc-wire", help="Comprimento do cabo DC"),
    la_wire: str = typer.Option("", "--la-wire", help="Comprimento do cabo do para-raios"),
    earthing_wire: str = typer.Option("", "--earthing-wire", help="Comprimento do cabo de aterramento"),
    legs: int = typer.Option(0, "--legs", help="Número de pernas da estrutura"),
    table_option: str = typer.Option("Standard", "--table", help="Standard | Custom"),
    front_leg: str = typer.Option("", "--front-leg"),
    back_leg: str = typer.Option("", "--back-leg"),
    roof_design: str = typer.Option("", "--roof-design"),
    panel_name: Optional[str] = typer.Option(None, "--panel-name"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Cadastra um projeto."""
    with _erros():
        spec = run_add_spec(
            {
                "customer": customer,
                "capacity_kw": kw,
                "panel_wattage": watt,
                "phase": phase,
                "ac_wire": ac_wire,
                "dc_wire": dc_wire,
                "la_wire": la_wire,
                "earthing_wire": earthing_wire,
                "legs": legs,
                "table_option": table_option,
                "front_leg": front_leg,
                "back_leg": back_leg,
                "roof_design": roof_design,
                "panel_name": panel_name,
            },
            db_path=db_path,
        )
    typer.echo(spec.id)


@spec_app.command("list")
def cmd_spec_list(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista os projetos cadastrados."""
    with _erros():
        rows = [_spec_row(s) for s in run_list_specs(db_path=db_path)]
    if as_json:
        _print_json(rows)
    else:
        _display_table(rows, title="Projetos")


@spec_app.command("delete")
def cmd_spec_delete(
    spec_id: str = typer.Argument(..., help="Id do projeto"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Remove um projeto (os eventos de estoque permanecem)."""
    with _erros():
        run_delete_spec(spec_id, db_path=db_path)
    typer.echo(f">> Projeto removido: {spec_id}")


@spec_app.command("bom")
def cmd_spec_bom(
    spec_id: str = typer.Argument(..., help="Id do projeto"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Mostra as linhas de material efetivas do projeto."""
    with _erros():
        rows = [_line_row(line) for line in run_generate_bom(spec_id, db_path=db_path)]
    if as_json:
        _print_json(rows)
    else:
        _display_table(rows, title=f"BOM {spec_id}")


@spec_app.command("lines")
def cmd_spec_lines(
    spec_id: str = typer.Argument(..., help="Id do projeto"),
    path: Optional[str] = typer.Argument(None, help="XLSX/CSV com as linhas (sr, item, description, make, qty, unit)"),
    clear: bool = typer.Option(False, "--clear", help="Descarta as linhas editadas"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Grava (ou descarta) linhas editadas de um projeto."""
    if clear:
        with _erros():
            run_clear_lines(spec_id, db_path=db_path)
        typer.echo(f">> Linhas editadas descartadas: {spec_id}")
        return
    if not path:
        typer.echo("Informe a planilha ou use --clear.", err=True)
        raise typer.Exit(code=1)
    with _erros():
        info = run_set_lines_from_sheet(spec_id, path, db_path=db_path)
    _display_table(info, title="Linhas Gravadas")


# -----------------------
# livro de estoque
# -----------------------

stock_app = typer.Typer(help="Movimentações do livro de estoque.")
app.add_typer(stock_app, name="stock")


def _register(fn, item, type_, qty, brand, rate, source, supplier, db_path) -> None:
    with _erros():
        ev = fn(
            item, type_, qty, db_path=db_path,
            brand=brand, rate=rate, source=source, supplier=supplier,
        )
    _display_table(_event_row(ev), title="Movimentação Registrada")


@stock_app.command("in")
def cmd_stock_in(
    item: str = typer.Option(..., "--item"),
    type_: str = typer.Option(..., "--type", help="Tipo/descrição do item"),
    qty: float = typer.Option(..., "--qty"),
    brand: Optional[str] = typer.Option(None, "--brand", help="Marca (padrão: standard)"),
    rate: float = typer.Option(0.0, "--rate", help="Preço unitário"),
    source: str = typer.Option("", "--source"),
    supplier: str = typer.Option("", "--supplier"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma entrada."""
    _register(run_stock_in, item, type_, qty, brand, rate, source, supplier, db_path)


@stock_app.command("out")
def cmd_stock_out(
    item: str = typer.Option(..., "--item"),
    type_: str = typer.Option(..., "--type", help="Tipo/descrição do item"),
    qty: float = typer.Option(..., "--qty"),
    brand: Optional[str] = typer.Option(None, "--brand", help="Marca (padrão: standard)"),
    rate: float = typer.Option(0.0, "--rate", help="Preço unitário"),
    source: str = typer.Option("", "--source"),
    supplier: str = typer.Option("", "--supplier"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Registra uma saída."""
    _register(run_stock_out, item, type_, qty, brand, rate, source, supplier, db_path)


@stock_app.command("delete")
def cmd_stock_delete(
    event_id: str = typer.Argument(..., help="Id do evento"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Remove um evento do livro."""
    with _erros():
        run_delete_event(event_id, db_path=db_path)
    typer.echo(f">> Evento removido: {event_id}")


@stock_app.command("import")
def cmd_stock_import(
    path: str = typer.Argument(..., help="XLSX/CSV de movimentações"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Importa movimentações em lote de uma planilha."""
    with _erros():
        info = run_events_from_sheet(path, db_path=db_path)
    _display_table(info, title="Importação de Movimentações")


@stock_app.command("list")
def cmd_stock_list(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Lista os eventos do livro em ordem cronológica."""
    with _erros():
        rows = [_event_row(ev) for ev in run_list_events(db_path=db_path)]
    if as_json:
        _print_json(rows)
    else:
        _display_table(rows, title="Livro de Estoque")


@app.command("stock-out")
def cmd_bom_stock_out(
    spec_id: str = typer.Argument(..., help="Id do projeto"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Dá baixa no estoque de todos os materiais do projeto."""
    with _erros():
        info = run_bom_stock_out(spec_id, db_path=db_path)
    _display_table(info, title="Baixa de Projeto")


# -----------------------
# limites de alerta
# -----------------------

th_app = typer.Typer(help="Limites de alerta (critical/low), globais e por item.")
app.add_typer(th_app, name="thresholds")


def _thresholds_rows(cfg: ThresholdConfig) -> List[Dict[str, Any]]:
    rows = [{"item": "(global)", "critical": cfg.critical, "low": cfg.low}]
    for name in sorted(cfg.overrides):
        pair = cfg.overrides[name]
        rows.append({"item": name, "critical": pair.critical, "low": pair.low})
    return rows


def _announce(db_path: str):
    """Listener: reclassifica o estoque com os limites recém-gravados."""
    def _listener(cfg: ThresholdConfig) -> None:
        counts = summarize(shortages_from_snapshot(load_snapshot(db_path), cfg))
        resumo = ", ".join(f"{k}={v}" for k, v in counts.items())
        typer.echo(f">> Limites gravados. Alertas: {resumo}")
    return _listener


@th_app.command("show")
def cmd_thresholds_show(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Mostra os limites efetivos (com fallback para os padrões)."""
    with _erros():
        require_existing(db_path)
        apply_migrations(db_path)
        cfg = ThresholdRepo(db_path).load()
    if as_json:
        _print_json(cfg.to_dict())
    else:
        _display_table(_thresholds_rows(cfg), title="Limites de Alerta")
        console.print(f"[dim]Padrões: critical={DEFAULTS.critical}, low={DEFAULTS.low}[/dim]")


@th_app.command("set")
def cmd_thresholds_set(
    critical: Optional[float] = typer.Option(None, "--critical"),
    low: Optional[float] = typer.Option(None, "--low"),
    item: Optional[str] = typer.Option(None, "--item", help="Define um override para o item"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Altera os limites globais ou de um item (critical deve ser menor que low)."""
    if critical is None and low is None:
        typer.echo("Nada a alterar. Informe --critical e/ou --low.", err=True)
        raise typer.Exit(code=1)
    with _erros():
        apply_migrations(db_path)
        repo = ThresholdRepo(db_path, listeners=[_announce(db_path)])
        cfg = repo.load()
        if item:
            base = cfg.for_item(item)
            cfg = cfg.with_override(
                item,
                base.critical if critical is None else critical,
                base.low if low is None else low,
            )
        else:
            cfg = ThresholdConfig(
                cfg.critical if critical is None else critical,
                cfg.low if low is None else low,
                cfg.overrides,
            )
        repo.save(cfg)


@th_app.command("clear-item")
def cmd_thresholds_clear_item(
    item: str = typer.Argument(..., help="Item cujo override será removido"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Remove o override de um item (volta a usar o global)."""
    with _erros():
        apply_migrations(db_path)
        repo = ThresholdRepo(db_path, listeners=[_announce(db_path)])
        cfg = repo.load()
        if item.strip() not in cfg.overrides:
            raise KeyError(f"item sem override: {item}")
        repo.save(cfg.without_override(item))


# -----------------------
# alertas e relatórios
# -----------------------

@app.command("alerts")
def cmd_alerts(
    status: Optional[List[str]] = typer.Option(None, "--status", help="missing | insufficient | critical | low (repetível)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Classifica faltas e estoque baixo."""
    with _erros():
        records = run_check_stock(db_path=db_path, statuses=status)
    rows = [r.to_dict() for r in records]
    if as_json:
        _print_json(rows)
        return
    _display_table(rows, title="Alertas de Estoque")
    counts = summarize(records)
    console.print(" | ".join(f"[{_STATUS_STYLE[k]}]{k}[/]: {v}" for k, v in counts.items()))


rel_app = typer.Typer(help="Relatórios de estoque")
app.add_typer(rel_app, name="rel")


@rel_app.command("balances")
def rel_balances(
    all_keys: bool = typer.Option(False, "--all", help="Inclui chaves com saldo zero"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Saldo atual por item/tipo/marca."""
    with _erros():
        res = relatorio_saldos(db_path=db_path, incluir_zerados=all_keys)
    if as_json:
        _print_json(res)
    else:
        _display_table(res, title="Saldos de Estoque")


@rel_app.command("requirements")
def rel_requirements(
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
    db_path: str = typer.Option(DB_PATH, "--db", help=DB_OPTION_HELP),
):
    """Necessidade agregada dos projetos x saldo atual."""
    with _erros():
        res = relatorio_necessidades(db_path=db_path)
    if as_json:
        _print_json(res)
    else:
        _display_table(res, title="Necessidades dos Projetos")


def main():
    app()


if __name__ == "__main__":
    main()
