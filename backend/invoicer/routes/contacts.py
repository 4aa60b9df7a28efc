"""
Invoicer Backend — Contacts Route Handlers
============================================

What:  GET /api/v1/contacts (list) and GET /api/v1/contacts/{public_id} (detail).
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

router = APIRouter(prefix="/api/v1", tags=["Contacts"])


@router.get(
    "/contacts",
    responses=LIST_RESPONSES,
    summary="List contacts",
    description="Client contacts on the account, newest first.",
)
async def list_contacts(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.CONTACT)


@router.get(
    "/contacts/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single contact",
)
async def get_contact(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.CONTACT, public_id)
