#!/usr/bin/env python3
"""
Bank Ledger Entry Point

Starts the interactive console, or the HTTP API with --serve.
"""

import argparse
import sys

from bank_ledger.config import get_config
from bank_ledger.logging_config import setup_logging


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bank ledger")
    parser.add_argument("--serve", action="store_true", help="run the HTTP API instead of the console")
    parser.add_argument("--host", default=None, help="API bind address")
    parser.add_argument("--port", type=int, default=None, help="API port")
    args = parser.parse_args(argv)

    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format)

    try:
        if args.serve:
            from bank_ledger.api import run_server
            run_server(host=args.host or config.api_host, port=args.port or config.api_port)
        else:
            from bank_ledger.console import BankConsole
            from bank_ledger.system import LedgerSystem
            system = LedgerSystem(config=config)
            BankConsole(system.engine, bank_name=system.config.bank_name).run()
    except KeyboardInterrupt:
        print()
    except Exception as e:
        print(f"Failed to start the application. {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
