import csv
import logging
import sys
from typing import Dict, List, Iterable, Tuple

from data_integrator import RecordStore, CUSTOMERS_TABLE
from services.customer_service import validate_customer

logger = logging.getLogger(__name__)

BATCH_SIZE = 500
CUSTOMER_COLUMNS = ["nome", "telefone", "endereco"]
CONFLICT_COLS = ["nome", "telefone"]


def chunked(items: List[Dict], size: int) -> Iterable[List[Dict]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def read_customers_csv(file_name: str) -> Tuple[List[Dict], List[Tuple[int, Dict[str, str]]]]:
    """
    Read a headered CSV of customers (nome, telefone, endereco).

    Returns (valid_rows, rejected) where rejected holds (line_no, errors)
    for rows that fail customer validation.
    """
    with open(file_name, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise ValueError("CSV has no header row. Expected: " + ", ".join(CUSTOMER_COLUMNS))

        header = [c.strip() for c in reader.fieldnames if c and c.strip()]
        missing = [c for c in CUSTOMER_COLUMNS if c not in header]
        if missing:
            raise ValueError(f"CSV missing columns: {missing}. Found: {header}")

        rows: List[Dict] = []
        rejected: List[Tuple[int, Dict[str, str]]] = []

        for line_no, r in enumerate(reader, start=2):
            cleaned = {(k or "").strip(): (v.strip() if isinstance(v, str) else v) for k, v in r.items()}
            row = {c: cleaned.get(c) or "" for c in CUSTOMER_COLUMNS}

            errors = validate_customer(row)
            if errors:
                rejected.append((line_no, errors))
                continue
            rows.append(row)

    return rows, rejected


def dedupe_rows(rows: List[Dict], key_cols: List[str]) -> List[Dict]:
    """Keep the first row for each key (case-insensitive)."""
    seen = set()
    out: List[Dict] = []

    for r in rows:
        key = tuple(str(r.get(c) or "").strip().lower() for c in key_cols)
        if key in seen:
            continue
        seen.add(key)
        out.append(r)

    return out


def import_customers_csv(store: RecordStore, file_name: str, batch_size: int = BATCH_SIZE) -> int:
    """
    Upsert customers from a CSV into `clientes`.

    (nome, telefone) must be a UNIQUE constraint in Postgres.
    Returns the number of rows sent; stops at the first failed batch.
    """
    rows, rejected = read_customers_csv(file_name)
    for line_no, errors in rejected:
        logger.warning("Line %d skipped: %s", line_no, "; ".join(errors.values()))

    deduped = dedupe_rows(rows, CONFLICT_COLS)
    if not deduped:
        logger.info("No valid customers to import from %s", file_name)
        return 0

    total = 0
    for batch in chunked(deduped, batch_size):
        ok, msg, _ = store.upsert(CUSTOMERS_TABLE, batch, CONFLICT_COLS)
        if not ok:
            raise RuntimeError(f"Import stopped after {total} rows: {msg}")
        total += len(batch)
        logger.info("Upserted %d customers (running total: %d)", len(batch), total)

    logger.info("Done: %s <- %s (%d unique rows)", CUSTOMERS_TABLE, file_name, total)
    return total


if __name__ == "__main__":
    from supabase_client import get_client, LOG_LEVEL

    logging.basicConfig(level=LOG_LEVEL)

    if len(sys.argv) != 2:
        raise SystemExit("usage: python -m utils.customer_import <clientes.csv>")

    # use a SERVICE_ROLE key in .env for scripts
    import_customers_csv(RecordStore(get_client()), sys.argv[1])
