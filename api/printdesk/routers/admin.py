import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.analytics.store import EventFilter, EventStore
from printdesk.core.database import get_db
from printdesk.core.dependencies import get_event_store
from printdesk.core.security import require_admin
from printdesk.models.activity import UserActivity
from printdesk.models.goal import UserGoal
from printdesk.services.export import DATASETS, export_filename, rows_to_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/export/{dataset}")
async def export_dataset(
    dataset: str,
    _admin=Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    store: EventStore = Depends(get_event_store),
) -> Response:
    """Download a dataset as CSV, newest rows first."""
    if dataset not in DATASETS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown dataset")

    if dataset == "analytics_events":
        result = await store.query(EventFilter(ascending=False))
        if not result.ok:
            logger.error("Exporting analytics events without rows: %s", result.error)
        rows = result.value
    elif dataset == "goals":
        rows = (await db.execute(select(UserGoal).order_by(UserGoal.created_at.desc()))).scalars().all()
    else:
        rows = (await db.execute(select(UserActivity).order_by(UserActivity.created_at.desc()))).scalars().all()

    filename = export_filename(dataset, datetime.now(UTC).date())
    return Response(
        content=rows_to_csv(dataset, rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
