import sys
from decimal import Decimal
from typing import Iterable, List, Optional, TextIO

from pydantic import ValidationError

from logging_config import setup_logging
from models import ClientAccount, MalformedInputError
from payments_engine import PaymentsEngine
from settings import get_settings

HEADER = "client,available,held,total,locked"


def format_decimal(value: Decimal) -> str:
    """Format decimal without trailing zeros or exponent."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_snapshot(accounts: Iterable[ClientAccount], out: TextIO) -> None:
    print(HEADER, file=out)
    for account in accounts:
        print(
            f"{account.client_id},"
            f"{format_decimal(account.available)},"
            f"{format_decimal(account.held)},"
            f"{format_decimal(account.total)},"
            f"{str(account.locked).lower()}",
            file=out,
        )


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        sys.exit(1)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)
    setup_logging(settings.log_level, settings.log_format)

    filepath = args[0]
    engine = PaymentsEngine(amount_precision=settings.amount_precision)
    try:
        report = engine.process_file(filepath)
    except MalformedInputError as e:
        print(f"Malformed input in {filepath}, {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Cannot read {filepath}: {e}", file=sys.stderr)
        sys.exit(1)

    write_snapshot(report.accounts.values(), sys.stdout)


if __name__ == "__main__":
    main()
