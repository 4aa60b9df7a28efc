"""
Invoicer Backend — Clients Route Handlers
===========================================

What:  GET /api/v1/clients (list) and GET /api/v1/clients/{public_id} (detail).
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

router = APIRouter(prefix="/api/v1", tags=["Clients"])


@router.get(
    "/clients",
    responses=LIST_RESPONSES,
    summary="List clients",
    description="Clients on the account, newest first, with their contacts. Supports include=invoices,expenses.",
)
async def list_clients(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.CLIENT)


@router.get(
    "/clients/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single client",
)
async def get_client(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.CLIENT, public_id)
