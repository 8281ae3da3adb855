from datetime import date
from typing import Annotated
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from moneyview.auth.models import User
from moneyview.business.service import get_business_profile
from moneyview.config import Settings
from moneyview.dependencies import get_business_tz, get_current_user, get_db, get_settings
from moneyview.reports import service
from moneyview.reports.export import report_to_csv
from moneyview.reports.pdf import generate_daily_report_pdf, generate_period_report_pdf

router = APIRouter()


def _pdf(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _csv(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/daily")
async def daily_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    day: date = Query(..., alias="date"),
) -> dict:
    report = await service.daily_report(db, current_user.id, day, tz)
    return {"data": report.model_dump()}


@router.get("/daily/pdf")
async def daily_report_pdf(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    settings: Annotated[Settings, Depends(get_settings)],
    day: date = Query(..., alias="date"),
) -> Response:
    report = await service.daily_report(db, current_user.id, day, tz)
    profile = await get_business_profile(db, current_user.id)
    return _pdf(generate_daily_report_pdf(report, profile, settings), f"daily-{day}.pdf")


@router.get("/daily/csv")
async def daily_report_csv(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    day: date = Query(..., alias="date"),
) -> Response:
    report = await service.daily_report(db, current_user.id, day, tz)
    return _csv(report_to_csv(report, tz), f"daily-{day}.csv")


@router.get("/monthly")
async def monthly_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
) -> dict:
    report = await service.monthly_report(db, current_user.id, month, year, tz)
    return {"data": report.model_dump()}


@router.get("/monthly/pdf")
async def monthly_report_pdf(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    settings: Annotated[Settings, Depends(get_settings)],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
) -> Response:
    report = await service.monthly_report(db, current_user.id, month, year, tz)
    profile = await get_business_profile(db, current_user.id)
    return _pdf(
        generate_period_report_pdf(report, profile, settings),
        f"report-{year}-{month:02d}.pdf",
    )


@router.get("/monthly/csv")
async def monthly_report_csv(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1900, le=9999),
) -> Response:
    report = await service.monthly_report(db, current_user.id, month, year, tz)
    return _csv(report_to_csv(report, tz), f"report-{year}-{month:02d}.csv")


@router.get("/range")
async def range_report(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    start: date = Query(...),
    end: date = Query(...),
) -> dict:
    report = await service.range_report(db, current_user.id, start, end, tz)
    return {"data": report.model_dump()}


@router.get("/range/pdf")
async def range_report_pdf(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    settings: Annotated[Settings, Depends(get_settings)],
    start: date = Query(...),
    end: date = Query(...),
) -> Response:
    report = await service.range_report(db, current_user.id, start, end, tz)
    profile = await get_business_profile(db, current_user.id)
    return _pdf(
        generate_period_report_pdf(report, profile, settings), f"report-{start}-{end}.pdf"
    )


@router.get("/range/csv")
async def range_report_csv(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
    start: date = Query(...),
    end: date = Query(...),
) -> Response:
    report = await service.range_report(db, current_user.id, start, end, tz)
    return _csv(report_to_csv(report, tz), f"report-{start}-{end}.csv")


@router.get("/pending-summary")
async def pending_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    summary = await service.get_pending_summary(db, current_user.id)
    return {"data": summary.model_dump()}


@router.get("/dashboard")
async def dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    tz: Annotated[ZoneInfo, Depends(get_business_tz)],
) -> dict:
    stats = await service.get_dashboard_stats(db, current_user.id, tz)
    return {"data": stats.model_dump()}
