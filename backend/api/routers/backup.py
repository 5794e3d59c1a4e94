"""
Backup, restore and data reset API router.
"""
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from backend.core.db import export_all_data, import_data, clear_all_data
from backend.api.security import require_api_key

router = APIRouter(tags=["Backup"])


@router.get("/api/backup")
def download_backup():
    """Everything stored, in the backup document format."""
    return export_all_data()


@router.post("/api/backup", dependencies=[Depends(require_api_key)])
def restore_backup(data: Dict[str, Any]):
    """Merge a backup document into the store (same ids are replaced)."""
    try:
        counts = import_data(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "imported": counts}


@router.delete("/api/data", dependencies=[Depends(require_api_key)])
def delete_all_data():
    """Delete every receipt, coupon, setting and claim."""
    clear_all_data()
    return {"success": True, "cleared_at": datetime.utcnow().isoformat()}
