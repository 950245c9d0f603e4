# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db solarstock.db
  python app.py spec add --customer "ACME" --kw 5 --watt 540 --phase SINGLE
  python app.py spec bom <spec_id>
  python app.py stock import movimentacoes.xlsx
  python app.py alerts --status missing
"""

from solarstock.adapters.cli import main

if __name__ == "__main__":
    main()
