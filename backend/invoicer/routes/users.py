"""
Invoicer Backend — Users Route Handlers
=========================================

What:  GET /api/v1/users (list) and GET /api/v1/users/{public_id} (detail).
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

router = APIRouter(prefix="/api/v1", tags=["Users"])


@router.get(
    "/users",
    responses=LIST_RESPONSES,
    summary="List users",
    description="Users on the account. Without the view_all permission only the current user is listed.",
)
async def list_users(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.list_response(db, ctx, EntityType.USER)


@router.get(
    "/users/{public_id}",
    responses=ITEM_RESPONSES,
    summary="Get a single user",
)
async def get_user(
    public_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    return await entity_service.show_response(db, ctx, EntityType.USER, public_id)
