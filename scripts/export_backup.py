"""Export one conversation's ledger to a CSV file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Write every entry of a LINE conversation to a backup CSV.",
    )
    parser.add_argument(
        "conversation_id",
        type=str,
        help="Group, room or user id the entries belong to.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("backup.csv"),
        help="Destination file (default: backup.csv).",
    )
    return parser.parse_args()


def export_backup(conversation_id: str, output: Path) -> int:
    """Write the CSV and return how many entries it holds."""
    if not conversation_id.strip():
        raise ValueError("conversation_id must not be empty")

    from kongklang.services.ledger_service import LedgerService
    from kongklang.services.replies import entries_to_csv
    from kongklang.utils.supabase_client import get_service_client

    ledger = LedgerService(get_service_client())
    entries = ledger.export_all(conversation_id)
    output.write_text(entries_to_csv(entries, ledger.tz) + "\n", encoding="utf-8")
    return len(entries)


def main() -> None:
    """CLI entry point."""
    args = parse_args()
    count = export_backup(args.conversation_id, args.output)
    print(f"Wrote {count} entr{'y' if count == 1 else 'ies'} to {args.output}")


if __name__ == "__main__":
    main()
