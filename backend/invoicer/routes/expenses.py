"""
Invoicer Backend — Expenses Route Handlers
============================================

What:  GET /api/v1/expenses (list) and GET /api/v1/expenses/{public_id} (detail).
How:   Resolves the request context and delegates to EntityService.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from invoicer.context import RequestContext, get_request_context
from invoicer.database import get_db_session
from invoicer.models import EntityType
from invoicer.routes.docs import ITEM_RESPONSES, LIST_RESPONSES
from invoicer.services.entity_service import entity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Expenses"])


@router.get(
    "/expenses",
    responses=LIST_RESPONSES,
    summary="List expenses",
    description="Expenses on the account, newest first. Supports include=client,vendor,invoice and client_id filtering.",
)
async def list_expenses(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.EXPENSE)


@router.get(
    "/expenses/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single expense",
)
async def get_expense(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.EXPENSE, public_id)
