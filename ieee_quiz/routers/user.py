import logging
import uuid
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Header
from fastapi.concurrency import run_in_threadpool

from ieee_quiz.config import Settings, get_settings
from ieee_quiz.dependencies import (
    get_clock, get_current_user, get_identity_provider, get_user_store,
)
from ieee_quiz.errors import InvalidRequest, Unauthenticated
from ieee_quiz.identity import IdentityProvider, LocalTokenIdentity, bearer_token
from ieee_quiz.models import SignupRequest, SignupResponse, UserRecord, UserResponse
from ieee_quiz.store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=SignupResponse)
async def signup(
    data: SignupRequest,
    authorization: Optional[str] = Header(None),
    identity: IdentityProvider = Depends(get_identity_provider),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
    clock=Depends(get_clock),
):
    """Create the caller's user record, or return the existing one."""
    name = data.name.strip()
    if not name:
        raise InvalidRequest("Name cannot be empty")
    if len(name) > 50:
        raise InvalidRequest("Name too long (max 50 chars)")

    token = bearer_token(authorization)
    access_token = None
    if token:
        user_id = await identity.resolve(token)
    elif isinstance(identity, LocalTokenIdentity):
        user_id = str(uuid.uuid4())
        access_token = await run_in_threadpool(identity.issue, user_id)
    else:
        raise Unauthenticated()

    existing = await run_in_threadpool(users.get, user_id)
    if existing:
        return SignupResponse(message="User already registered", user=existing)

    user = UserRecord(
        id=user_id,
        name=name,
        email=data.email,
        membership_type=data.membership_type or "non-ieee-member",
        avatar=f"{settings.avatar_base_url}?seed={quote(name)}",
        created_at=clock(),
    )
    await run_in_threadpool(users.set, user)
    logger.info("Registered user %s (%s)", user_id, name)

    return SignupResponse(message="User created successfully", user=user, access_token=access_token)


@router.get("/user", response_model=UserResponse)
def get_user(user: UserRecord = Depends(get_current_user)):
    """The caller's record."""
    return UserResponse(user=user)
