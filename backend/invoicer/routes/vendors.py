"""
Invoicer Backend — Vendors Route Handlers
===========================================

What:  GET /api/v1/vendors (list) and GET /api/v1/vendors/{public_id} (detail).
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

router = APIRouter(prefix="/api/v1", tags=["Vendors"])


@router.get(
    "/vendors",
    responses=LIST_RESPONSES,
    summary="List vendors",
    description="Vendors on the account, newest first, with their contacts. Supports include=expenses.",
)
async def list_vendors(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.VENDOR)


@router.get(
    "/vendors/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single vendor",
)
async def get_vendor(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.VENDOR, public_id)
