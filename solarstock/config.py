# solarstock/config.py
"""
Configurações globais e valores padrão do sistema de estoque solar.
"""

import os
from dataclasses import dataclass


# Caminho padrão do banco de dados SQLite
DB_PATH = os.environ.get("SOLARSTOCK_DB") or os.path.join(os.getcwd(), "solarstock.db")

# Diretório dos arquivos de log (só é criado quando o logging é habilitado)
LOG_DIR = os.environ.get("SOLARSTOCK_LOG_DIR") or os.path.join(os.getcwd(), "logs")

# Marca usada quando o item não informa make/brand
STANDARD_BRAND = "standard"

# Tipo de tabela que dispensa o motor de regras
CUSTOM_TABLE_OPTION = "Custom"


@dataclass
class DefaultConfig:
    """Valores padrão para os limites de alerta de estoque."""
    critical: float = 5.0  # estoque <= critical -> 'critical'
    low: float = 10.0      # estoque <= low -> 'low'


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
