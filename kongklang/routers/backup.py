"""CSV backup download endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from kongklang.dependencies import get_backup_ledger
from kongklang.services.ledger_service import LedgerService
from kongklang.services.replies import entries_to_csv

router = APIRouter()


@router.get("/{conversation_id}/backup.csv")
def download_backup(
    conversation_id: str,
    ledger: LedgerService = Depends(get_backup_ledger),
) -> Response:
    """Return every entry of a conversation in the backup CSV format."""
    csv_text = entries_to_csv(ledger.export_all(conversation_id), ledger.tz)
    return Response(
        content=csv_text + "\n",
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="backup.csv"'},
    )
