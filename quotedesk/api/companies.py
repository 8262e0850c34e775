"""Company administration endpoints (admin only)."""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from quotedesk.api.deps import get_admin
from quotedesk.companies.service import company_service
from quotedesk.db.engine import get_session
from quotedesk.schemas.company import CompanyCreate, CompanyRead
from quotedesk.schemas.principal import Principal

router = APIRouter(prefix="/admin/companies", tags=["companies"])


@router.post("", response_model=CompanyRead, status_code=201)
async def create_company(
    body: CompanyCreate,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> CompanyRead:
    company = await company_service.create_company(db, body, admin)
    return CompanyRead.model_validate(company)


@router.get("", response_model=list[CompanyRead])
async def list_companies(
    active: bool | None = Query(None),
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> list[CompanyRead]:
    companies = await company_service.list_companies(db, active=active)
    return [CompanyRead.model_validate(c) for c in companies]


@router.delete("/{company_id}", status_code=204)
async def delete_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
    admin: Principal = Depends(get_admin),
) -> Response:
    await company_service.delete_company(db, company_id, admin)
    return Response(status_code=204)
