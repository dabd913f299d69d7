from fastapi import APIRouter, Depends

from ieee_quiz.dependencies import get_request_context, get_user_store
from ieee_quiz.identity import RequestContext
from ieee_quiz.models import LeaderboardEntry
from ieee_quiz.ranking import rank_users
from ieee_quiz.store import UserStore

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("", response_model=list[LeaderboardEntry])
def get_leaderboard(
    ctx: RequestContext = Depends(get_request_context),
    users: UserStore = Depends(get_user_store),
):
    """Leaderboard ranked by best score, then XP, then earliest completion."""
    return rank_users(users.list_all())
