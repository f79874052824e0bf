"""Attendance reports: filtered record listing, export and per-group ranking."""
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from app.api.deps import CurrentUser
from app.config import settings
from app.models.user import UserRole
from app.services.aggregator import (
    count_statuses,
    daily_trend,
    group_reports,
    overall_summary,
    preset_days,
    preset_range,
    program_breakdown,
    records_between,
    shift_breakdown,
)
from app.services.dates import local_today
from app.services.export import records_frame, to_csv, to_excel
from app.services.hierarchy import HierarchyFilter, filter_options
from app.services.record_filter import ReportFilters, cap_results, query_records
from app.services.reference_index import ReferenceIndex
from app.services.snapshot import REFERENCE_COLLECTIONS, get_snapshot

router = APIRouter()

TOP_PROGRAMS = 6


def report_filters(
    campus_id: Optional[str] = None,
    school_id: Optional[str] = None,
    program_id: Optional[str] = None,
    group_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    shift: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    q: Optional[str] = Query(None, description="Student name, student number or group"),
) -> ReportFilters:
    try:
        return ReportFilters(
            campus_id=campus_id,
            school_id=school_id,
            program_id=program_id,
            group_id=group_id,
            teacher_id=teacher_id,
            shift=shift,
            status=status,
            start_date=start_date,
            end_date=end_date,
            search=q,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid report filters: {e}")


Filters = Annotated[ReportFilters, Depends(report_filters)]


@router.get("/options")
async def get_filter_options(
    user: CurrentUser,
    campus_id: Optional[str] = None,
    school_id: Optional[str] = None,
    program_id: Optional[str] = None,
):
    snapshot = await get_snapshot(*REFERENCE_COLLECTIONS)
    index = ReferenceIndex(snapshot)
    state = HierarchyFilter(campus_id=campus_id, school_id=school_id, program_id=program_id)
    options = filter_options(index, state)
    options["teachers"] = [
        {"id": u.id, "name": u.display_name}
        for u in index.users.values()
        if u.role == UserRole.TEACHER and u.is_active
    ]
    return options


@router.get("/records")
async def get_records(user: CurrentUser, filters: Filters):
    """Matching records, newest first; ``items`` is capped, counts are not."""
    snapshot = await get_snapshot(*REFERENCE_COLLECTIONS, "records")
    index = ReferenceIndex(snapshot)
    rows = query_records(snapshot.records, index, filters)
    counts = count_statuses(rows)
    return {
        "items": cap_results(rows, settings.report_result_cap),
        "total": len(rows),
        "counts": counts,
        "attendance_rate": counts.attendance_rate,
    }


@router.get("/records/export")
async def export_records(
    user: CurrentUser,
    filters: Filters,
    format: Literal["csv", "excel"] = "csv",
):
    snapshot = await get_snapshot(*REFERENCE_COLLECTIONS, "records")
    rows = query_records(snapshot.records, ReferenceIndex(snapshot), filters)
    df = records_frame(rows)
    stamp = local_today().isoformat()

    if format == "excel":
        return StreamingResponse(
            to_excel(df),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f'attachment; filename="asistencia_{stamp}.xlsx"'},
        )
    return StreamingResponse(
        iter([to_csv(df)]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="asistencia_{stamp}.csv"'},
    )


@router.get("/groups")
async def get_group_report(user: CurrentUser, date_range: str = Query("week", alias="range")):
    """Per-group ranking plus trend and breakdowns for a trailing date preset."""
    try:
        days = preset_days(date_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    today = local_today()
    start, end = preset_range(date_range, today)

    snapshot = await get_snapshot(*REFERENCE_COLLECTIONS, "records")
    index = ReferenceIndex(snapshot)
    records = records_between(snapshot.records, start, end)
    reports = group_reports(records, index)

    return {
        "range": date_range,
        "start_date": start,
        "end_date": end,
        "groups": reports,
        "summary": overall_summary(reports),
        "trend": daily_trend(records, days, today),
        "programs": program_breakdown(records, index)[:TOP_PROGRAMS],
        "shifts": shift_breakdown(records, index),
    }
