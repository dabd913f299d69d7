from datetime import date, datetime, timezone, tzinfo
from typing import Optional

from ieee_quiz.errors import AlreadyAttemptedToday
from ieee_quiz.models import UserRecord


def _local_date(moment: datetime, tz: tzinfo) -> date:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def can_attempt(last_attempt_at: Optional[datetime], now: datetime, tz: tzinfo = timezone.utc) -> bool:
    """True unless the last attempt fell on the same calendar day as `now` in `tz`."""
    if last_attempt_at is None:
        return True
    return _local_date(last_attempt_at, tz) != _local_date(now, tz)


def ensure_can_attempt(user: UserRecord, now: datetime, tz: tzinfo = timezone.utc) -> None:
    if not can_attempt(user.last_attempt_at, now, tz):
        raise AlreadyAttemptedToday(user.last_attempt_at)
