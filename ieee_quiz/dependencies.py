import logging
import random
from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends, Header
from sqlmodel import Session

from ieee_quiz.config import Settings, get_settings
from ieee_quiz.database import get_session
from ieee_quiz.errors import Unauthenticated, UserRecordNotFound
from ieee_quiz.identity import (
    IdentityProvider, LocalTokenIdentity, RemoteIdentity, RequestContext, bearer_token,
)
from ieee_quiz.models import UserRecord, utcnow
from ieee_quiz.store import RecordStore, UserStore

logger = logging.getLogger(__name__)


def get_record_store(session: Session = Depends(get_session)) -> RecordStore:
    return RecordStore(session)


def get_user_store(records: RecordStore = Depends(get_record_store)) -> UserStore:
    return UserStore(records)


def get_identity_provider(
    settings: Settings = Depends(get_settings),
    records: RecordStore = Depends(get_record_store),
) -> IdentityProvider:
    if settings.identity_url:
        return RemoteIdentity(
            settings.identity_url,
            api_key=settings.identity_api_key,
            timeout=settings.identity_timeout,
        )
    return LocalTokenIdentity(records)


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_rng() -> random.Random:
    return random.Random()


async def get_request_context(
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity_provider),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> RequestContext:
    token = bearer_token(authorization)
    if not token:
        logger.warning("Request without bearer token")
        raise Unauthenticated()
    user_id = await identity.resolve(token)
    return RequestContext(user_id=user_id, now=clock())


def get_current_user(
    ctx: RequestContext = Depends(get_request_context),
    users: UserStore = Depends(get_user_store),
) -> UserRecord:
    user = users.get(ctx.user_id)
    if not user:
        logger.error("No user record for authenticated id %s", ctx.user_id)
        raise UserRecordNotFound(ctx.user_id)
    return user
