import argparse
import asyncio
from pathlib import Path

from arena_payments.database import init_db
from arena_payments.db import RecordStore
from arena_payments.logging_config import get_logger
from arena_payments.reconciliation import generate_ledger_report_csv


logger = get_logger(__name__)


async def write_ledger_report(arena_id: str, output_path: str = "ledger_report.csv", store: RecordStore | None = None) -> int:
    store = store or RecordStore()
    csv_text, mismatch_count = await generate_ledger_report_csv(store, arena_id)
    Path(output_path).write_text(csv_text, encoding="utf-8")
    logger.info("Wrote ledger report for arena=%s to %s", arena_id, output_path)
    return 1 if mismatch_count else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Compare paid tournament players against ledger entries.")
    parser.add_argument("arena_id")
    parser.add_argument("--output", default="ledger_report.csv")
    args = parser.parse_args()
    init_db()
    exit_code = asyncio.run(write_ledger_report(args.arena_id, args.output))
    raise SystemExit(exit_code)
