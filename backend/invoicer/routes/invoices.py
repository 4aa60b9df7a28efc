"""
Invoicer Backend — Invoices Route Handlers
============================================

What:  GET /api/v1/invoices (list) and GET /api/v1/invoices/{public_id} (detail).
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

router = APIRouter(prefix="/api/v1", tags=["Invoices"])


@router.get(
    "/invoices",
    responses=LIST_RESPONSES,
    summary="List invoices",
    description="Invoices on the account, newest first, with their line items. Supports include=client and client_id filtering.",
)
async def list_invoices(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.INVOICE)


@router.get(
    "/invoices/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single invoice",
)
async def get_invoice(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.INVOICE, public_id)
