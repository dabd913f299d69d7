from datetime import datetime, timezone
from typing import Iterable

from ieee_quiz.models import LeaderboardEntry, UserRecord


def _completed_at(user: UserRecord) -> datetime:
    moment = user.last_attempt_at or user.created_at
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def rank_users(users: Iterable[UserRecord]) -> list[LeaderboardEntry]:
    """
    Rank users who have scored: best score desc, then total XP desc, then
    earliest completion first. Ranks are positions; ties never share a rank.
    """
    scored = [u for u in users if u.best_score > 0]
    scored.sort(key=lambda u: (-u.best_score, -u.total_xp, _completed_at(u)))

    return [
        LeaderboardEntry(
            rank=position,
            id=u.id,
            name=u.name,
            avatar=u.avatar,
            score=u.best_score,
            xp=u.total_xp,
            badges=list(u.badges),
            time_spent=u.last_time_spent_seconds or None,
        )
        for position, u in enumerate(scored, start=1)
    ]
