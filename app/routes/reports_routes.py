from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.deps.auth import get_current_user, require_auth
from app.models.report_model import Report
from app.models.user_model import User
from app.schemas.report_schemas import ReportCreate, ReportOut, ReportUpdate, ReportWithAuthorOut
from app.services.target_service import TargetService
from app.utils.token_utils import TokenClaims

router = APIRouter(prefix="/reports", tags=["reports"])

reports = TargetService(Report, "report")


def _report_out(report: Report, include_author: bool) -> ReportOut:
    if include_author:
        return ReportWithAuthorOut.model_validate(report)
    return ReportOut.model_validate(report)


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    db: AsyncSession = Depends(get_async_session),
    author: User = Depends(get_current_user),
):
    # The author is always the caller, whatever the body says
    return await reports.create(db, payload.model_dump(), author_id=author.id)


@router.get("", response_model=List[ReportWithAuthorOut])
async def list_reports(
    include_author: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
):
    rows = await reports.list_all(db, include_author=include_author)
    return [_report_out(r, include_author) for r in rows]


@router.get("/author/{author_id}", response_model=List[ReportWithAuthorOut])
async def list_reports_by_author(
    author_id: str,
    include_author: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
):
    rows = await reports.list_by_author(db, author_id, include_author=include_author)
    return [_report_out(r, include_author) for r in rows]


@router.get("/{report_id}", response_model=ReportWithAuthorOut)
async def get_report(
    report_id: int,
    include_author: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
):
    report = await reports.get(db, report_id, include_author=include_author)
    return _report_out(report, include_author)


@router.patch("/{report_id}", response_model=ReportOut)
async def update_report(
    report_id: int,
    payload: ReportUpdate,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    return await reports.update(db, report_id, payload.model_dump(exclude_unset=True), claims)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: int,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_auth),
):
    await reports.delete(db, report_id, claims)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
