# solarstock/infra/logger.py
"""
Logs em arquivo do estoque solar.

Quatro canais, um arquivo cada:
- transactions: resultado (sucesso/falha) de cada caso de uso
- events: gravações e remoções no livro de estoque
- database: escritas por tabela
- system: início/fim de rotinas, importações de planilha, avisos

Nada é gravado até ``enable_logging`` ser chamado (flag ``--log`` da CLI ou
``SOLARSTOCK_LOGGING=1``). Com o logging desligado os helpers ``log_*``
retornam sem formatar nada.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from solarstock.config import LOG_DIR


ENABLE_LOGGING = False

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# canal -> arquivo
LOG_FILES = {
    "transactions": "transactions.log",
    "events": "events.log",
    "database": "database.log",
    "system": "system.log",
}

transaction_logger = logging.getLogger('solarstock.transactions')
event_logger = logging.getLogger('solarstock.events')
database_logger = logging.getLogger('solarstock.database')
system_logger = logging.getLogger('solarstock.system')

_CHANNELS = {
    "transactions": transaction_logger,
    "events": event_logger,
    "database": database_logger,
    "system": system_logger,
}

_logs_dir: Path = Path(LOG_DIR)

_TRUTHY = {"1", "true", "yes", "on"}


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logger(name: str, log_file: str, level: int = logging.INFO) -> logging.Logger:
    """Liga ``name`` a um único FileHandler em ``log_file`` (cria a pasta)."""
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    _drop_handlers(logger)
    handler = logging.FileHandler(log_file, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
    return logger


def enable_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> Path:
    """Abre os arquivos de log em ``log_dir`` (padrão: LOG_DIR) e liga os helpers."""
    global ENABLE_LOGGING, _logs_dir
    _logs_dir = Path(log_dir or LOG_DIR)
    for channel, logger in _CHANNELS.items():
        setup_logger(logger.name, str(_logs_dir / LOG_FILES[channel]), level)
    ENABLE_LOGGING = True
    return _logs_dir


def disable_logging() -> None:
    global ENABLE_LOGGING
    for logger in _CHANNELS.values():
        _drop_handlers(logger)
    ENABLE_LOGGING = False


def logging_requested() -> bool:
    return os.environ.get("SOLARSTOCK_LOGGING", "").strip().lower() in _TRUTHY


def log_transaction(operation: str, data: Dict[str, Any], result: Optional[Any] = None, error: Optional[str] = None) -> None:
    """Fecha um caso de uso: ``error`` preenchido vira TRANSACTION_FAILED."""
    if not ENABLE_LOGGING:
        return
    if error:
        transaction_logger.error(f"TRANSACTION_FAILED: {operation} - {error} - Data: {data}")
    else:
        transaction_logger.info(f"TRANSACTION_SUCCESS: {operation} - Result: {result} - Data: {data}")


def log_stock_event(action: str, item: str, type_: str, quantity: Any, direction: Optional[str] = None, **extra) -> None:
    """Movimentação do livro (``action``: insert, delete, import)."""
    if not ENABLE_LOGGING:
        return
    payload = {"item": item, "type": type_, "quantity": quantity, "direction": direction, **extra}
    event_logger.info(f"EVENT_{action.upper()}: {payload}")


def log_database_operation(table: str, operation: str, affected_rows: int = 0, **extra) -> None:
    if not ENABLE_LOGGING:
        return
    payload = {"table": table, "affected_rows": affected_rows, **extra}
    database_logger.info(f"DB_{operation}: {payload}")


def log_system_event(event: str, details: Optional[Dict[str, Any]] = None, level: str = "info") -> None:
    """Evento de sistema; ``level`` é o nome do método do logger (info, warning, error)."""
    if not ENABLE_LOGGING:
        return
    emit = getattr(system_logger, level.lower(), system_logger.info)
    emit(f"SYSTEM_EVENT: {event} - {details or {}}")


def log_file_operation(operation: str, file_path: str, rows_processed: int = 0, **extra) -> None:
    if not ENABLE_LOGGING:
        return
    payload = {"file_path": file_path, "rows_processed": rows_processed, **extra}
    system_logger.info(f"FILE_{operation.upper()}: {payload}")


def get_log_summary(log_type: str = "transactions", lines: int = 100) -> Optional[str]:
    """Últimas ``lines`` linhas de um canal; ``None`` com o logging desligado."""
    if not ENABLE_LOGGING:
        return None
    name = LOG_FILES.get(log_type)
    path = _logs_dir / name if name else None
    if path is None or not path.exists():
        return f"Log {log_type} não encontrado."
    try:
        content = path.read_text(encoding='utf-8').splitlines(keepends=True)
    except OSError as e:
        return f"Erro ao ler log {log_type}: {e}"
    return ''.join(content[-lines:])
