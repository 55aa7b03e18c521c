"""
Service-level routes (banner, health).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Task Management System API"}


@router.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
