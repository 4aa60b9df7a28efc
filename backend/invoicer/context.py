"""
Invoicer Backend — Request Context
====================================

What:  The explicit per-request value every API operation receives: the
       current user, their account and the parsed API parameters.
Why:   Nothing below the routes reads ambient request or session state;
       the context is built once by FastAPI dependencies and passed down.
How:   get_api_params() reads the query string, get_request_context()
       authenticates the API token header and combines both.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invoicer.config import settings
from invoicer.database import get_db_session
from invoicer.exceptions import AuthenticationError, ValidationError
from invoicer.models.account import Account, ApiToken, User
from invoicer.schemas.api import ApiParams
from invoicer.transformers.base import OutputMode

logger = logging.getLogger(__name__)

# Grants visibility of every record on the account, not just the user's own
VIEW_ALL_PERMISSION = "view_all"


@dataclass(frozen=True)
class RequestContext:
    user: User
    account: Account
    params: ApiParams

    @property
    def output_mode(self) -> OutputMode:
        return self.params.output_mode

    @property
    def can_view_all(self) -> bool:
        return self.user.has_permission(VIEW_ALL_PERMISSION)


def get_api_params(
    include: str = Query(default="", description="Comma-separated relations to embed"),
    serializer: str = Query(default=OutputMode.FLAT.value, description="'array' or 'jsonapi'"),
    per_page: Optional[int] = Query(default=None, description="Page size, clamped to the API maximum"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    updated_at: Optional[int] = Query(
        default=None, description="Only records changed at or after this UNIX timestamp"
    ),
    client_id: Optional[int] = Query(default=None, description="Client public id filter"),
    index: str = Query(default="data", description="Envelope key; 'none' disables wrapping"),
) -> ApiParams:
    if not index.strip():
        raise ValidationError("index must not be empty", field="index")
    return ApiParams(
        include=include,
        serializer=serializer,
        per_page=per_page,
        page=page,
        updated_at=updated_at,
        client_id=client_id,
        index=index,
    )


async def get_request_context(
    request: Request,
    params: ApiParams = Depends(get_api_params),
    db: AsyncSession = Depends(get_db_session),
) -> RequestContext:
    """
    Resolves the API token header to a user and builds the request context.

    Raises:
        AuthenticationError: Header missing, unknown token, or revoked token (→ 401)
    """
    token = request.headers.get(settings.api_token_header)
    if not token:
        raise AuthenticationError(message="Missing token")

    result = await db.execute(
        select(ApiToken).where(ApiToken.token == token, ApiToken.deleted_at.is_(None))
    )
    api_token: Optional[ApiToken] = result.scalar_one_or_none()
    if api_token is None or api_token.user is None:
        logger.warning("Rejected API request with unknown token")
        raise AuthenticationError(message="Invalid token")

    user = api_token.user
    return RequestContext(user=user, account=user.account, params=params)
