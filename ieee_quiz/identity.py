import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

import httpx
from fastapi.concurrency import run_in_threadpool

from ieee_quiz.errors import Unauthenticated
from ieee_quiz.models import utcnow
from ieee_quiz.store import TOKEN_PREFIX, RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Who is calling and when; passed explicitly into every operation."""

    user_id: str
    now: datetime


class IdentityProvider(Protocol):
    async def resolve(self, token: str) -> str:
        """Map an access token to a stable user id or raise Unauthenticated."""
        ...


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class LocalTokenIdentity:
    """Opaque tokens kept in the record store, issued at signup."""

    def __init__(self, records: RecordStore):
        self.records = records

    def issue(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        self.records.set(f"{TOKEN_PREFIX}{token}", {
            "userId": user_id,
            "createdAt": utcnow().isoformat(),
        })
        return token

    def lookup(self, token: str) -> str:
        data = self.records.get(f"{TOKEN_PREFIX}{token}")
        if not data or not data.get("userId"):
            raise Unauthenticated()
        return data["userId"]

    async def resolve(self, token: str) -> str:
        # Session I/O runs in the threadpool, never on the event loop
        return await run_in_threadpool(self.lookup, token)


class RemoteIdentity:
    """Resolves tokens against an external auth service's user endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = f"{base_url.rstrip('/')}/auth/v1/user"
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def resolve(self, token: str) -> str:
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Identity service unreachable: %s", e)
            raise Unauthenticated() from e

        if response.status_code != 200:
            raise Unauthenticated()

        try:
            payload = response.json()
        except ValueError as e:
            raise Unauthenticated() from e
        user_id = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise Unauthenticated()
        return str(user_id)
