"""Daily logbooks: submission, review, weekly sheets and export."""
import datetime
import io
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response, StreamingResponse
import pandas as pd

from internhub.api.deps import AdminOnly, CurrentUser, StaffOnly
from internhub.errors import InsufficientEntriesError
from internhub.models.logbook import LogbookEntryCreate, LogbookEntryUpdate, LogbookReviewCreate, LogbookStatus
from internhub.services import logbook_ingestion, logbooks
from internhub.services.lookups import serialize

router = APIRouter()


@router.post("/", status_code=201)
async def create_logbook(data: LogbookEntryCreate, user: CurrentUser):
    return await logbook_ingestion.submit(user, data)


@router.get("/")
async def list_logbooks(
    user: StaffOnly,
    intern_id: Optional[str] = None,
    status: Optional[LogbookStatus] = None,
    week_number: Optional[int] = Query(default=None, ge=1),
    date_from: Optional[datetime.date] = None,
    date_to: Optional[datetime.date] = None,
):
    entries = await logbooks.list_entries(user, intern_id, status, week_number, date_from, date_to)
    return [serialize(e) for e in entries]


@router.get("/mine")
async def my_logbooks(user: CurrentUser):
    return [serialize(e) for e in await logbooks.list_mine(user)]


@router.get("/export")
async def export_logbooks(
    user: StaffOnly,
    format: Literal["csv", "excel"] = "csv",
    intern_id: Optional[str] = None,
    status: Optional[LogbookStatus] = None,
    week_number: Optional[int] = Query(default=None, ge=1),
    date_from: Optional[datetime.date] = None,
    date_to: Optional[datetime.date] = None,
):
    df = await logbooks.export_frame(
        user,
        intern_id=intern_id,
        status=status,
        week_number=week_number,
        date_from=date_from,
        date_to=date_to,
    )
    if df.empty:
        raise HTTPException(status_code=404, detail="No records found for the given criteria")

    stamp = datetime.date.today().isoformat()
    if format == "csv":
        stream = io.StringIO()
        df.to_csv(stream, index=False)
        return StreamingResponse(
            iter([stream.getvalue()]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=logbooks_{stamp}.csv"},
        )
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Logbooks")
    output.seek(0)
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=logbooks_{stamp}.xlsx"},
    )


@router.get("/week-status")
async def week_status(user: CurrentUser, week_number: int = Query(ge=1), intern_id: Optional[str] = None):
    return await logbooks.week_status(user, week_number, intern_id)


@router.post("/recompute-weeks")
async def recompute_weeks(admin: AdminOnly, intern_id: Optional[str] = None):
    updated = await logbooks.recompute_week_numbers(admin, intern_id)
    return {"message": "Week numbers recomputed", "updated": updated}


@router.post("/weeks/{week_number}/pdf")
async def generate_week_pdf(week_number: int, user: CurrentUser, intern_id: Optional[str] = None):
    try:
        return await logbooks.generate_week_pdf(user, week_number, intern_id)
    except InsufficientEntriesError as e:
        return JSONResponse(status_code=400, content=e.to_dict())


@router.get("/weeks/{week_number}/pdf")
async def download_week_pdf(week_number: int, user: CurrentUser, intern_id: Optional[str] = None):
    filename, body = await logbooks.download_week_pdf(user, week_number, intern_id)
    return Response(
        content=body,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{entry_id}")
async def show_logbook(entry_id: str, user: CurrentUser):
    entry = await logbooks.get_entry(user, entry_id)
    reviews = await logbooks.entry_reviews(entry)
    return {**serialize(entry), "reviews": [serialize(r) for r in reviews]}


@router.put("/{entry_id}")
async def update_logbook(entry_id: str, data: LogbookEntryUpdate, user: CurrentUser):
    entry = await logbooks.update_entry(user, entry_id, data)
    return serialize(entry)


@router.delete("/{entry_id}")
async def delete_logbook(entry_id: str, user: CurrentUser):
    await logbooks.delete_entry(user, entry_id)
    return {"message": "Logbook entry deleted"}


@router.post("/{entry_id}/reviews", status_code=201)
async def review_logbook(entry_id: str, data: LogbookReviewCreate, user: StaffOnly):
    review = await logbooks.review_entry(user, entry_id, data)
    return {"message": "Logbook reviewed", "review": serialize(review)}


@router.get("/{entry_id}/reviews")
async def list_reviews(entry_id: str, user: CurrentUser):
    entry = await logbooks.get_entry(user, entry_id)
    return [serialize(r) for r in await logbooks.entry_reviews(entry)]
