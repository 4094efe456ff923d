import csv
import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Iterable, List, Optional

from models import MalformedInputError, Transaction, TransactionType

logger = logging.getLogger(__name__)

# withdrawal is the spelling used by most upstream exports
TYPE_ALIASES = {"withdrawal": TransactionType.WITHDRAW}

AMOUNT_REQUIRED = (TransactionType.DEPOSIT, TransactionType.WITHDRAW)


def read_transactions(filepath: str, amount_precision: int = 4) -> List[Transaction]:
    """
    Read a whole CSV file into transactions.
    Raises MalformedInputError on the first bad line, so callers either get
    every record or none of them.
    """
    # utf-8-sig drops the BOM spreadsheet exports put in front of the header;
    # undecodable bytes are kept as surrogates and rejected per line below
    with open(filepath, "r", newline="", encoding="utf-8-sig", errors="surrogateescape") as f:
        reader = csv.reader(f)
        try:
            return parse_rows(reader, amount_precision)
        except csv.Error as e:
            raise MalformedInputError(reader.line_num, str(e)) from None


def parse_rows(rows: Iterable[List[str]], amount_precision: int = 4) -> List[Transaction]:
    transactions = []
    for line_number, row in enumerate(rows, start=1):
        fields = [value.strip() for value in row]
        if not any(fields):
            continue
        _check_encoding(fields, line_number)
        if line_number == 1 and fields[0].lower() == "type":
            continue
        transactions.append(parse_row(fields, line_number, amount_precision))

    logger.info(f"Parsed {len(transactions)} transactions")
    return transactions


def parse_row(fields: List[str], line_number: int, amount_precision: int = 4) -> Transaction:
    """Parse one tokenized CSV row into a Transaction."""
    if len(fields) not in (3, 4):
        raise MalformedInputError(line_number, f"expected 3 or 4 fields, got {len(fields)}")

    transaction_type = _parse_type(fields[0], line_number)
    client_id = _parse_id(fields[1], "client", line_number)
    transaction_id = _parse_id(fields[2], "tx", line_number)
    amount_str = fields[3] if len(fields) == 4 else ""

    amount = None
    if transaction_type in AMOUNT_REQUIRED:
        if not amount_str:
            raise MalformedInputError(line_number, f"{transaction_type.value} requires an amount")
        amount = _parse_amount(amount_str, amount_precision, line_number)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _check_encoding(fields: List[str], line_number: int) -> None:
    for value in fields:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise MalformedInputError(line_number, "line is not valid UTF-8") from None


def _parse_type(value: str, line_number: int) -> TransactionType:
    value = value.lower()
    if value in TYPE_ALIASES:
        return TYPE_ALIASES[value]
    try:
        return TransactionType(value)
    except ValueError:
        raise MalformedInputError(line_number, f"unknown transaction type {value!r}") from None


def _parse_id(value: str, name: str, line_number: int) -> int:
    if not (value.isascii() and value.isdigit()):
        raise MalformedInputError(line_number, f"{name} must be a non-negative integer, got {value!r}")
    return int(value)


def _parse_amount(value: str, precision: int, line_number: int) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedInputError(line_number, f"amount {value!r} is not a decimal") from None

    if not amount.is_finite() or amount < 0:
        raise MalformedInputError(line_number, f"amount must be a non-negative decimal, got {value!r}")

    quantized = _truncate(amount, precision)
    if quantized is None:
        raise MalformedInputError(line_number, f"amount {value!r} is out of range")
    return quantized


def _truncate(amount: Decimal, precision: int) -> Optional[Decimal]:
    try:
        return amount.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_DOWN)
    except InvalidOperation:
        return None
