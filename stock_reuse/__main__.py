# stock_reuse/__main__.py
# Package entrypoint so you can run:
#   python -m stock_reuse --help
#
# Examples:
#   python -m stock_reuse --demands demands.csv --stock stock.csv
#   python -m stock_reuse --job job.json --out out/

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
