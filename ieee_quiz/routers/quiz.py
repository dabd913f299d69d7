import logging
import random
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from ieee_quiz.config import Settings, get_settings
from ieee_quiz.dependencies import (
    get_current_user, get_request_context, get_rng, get_user_store,
)
from ieee_quiz.eligibility import can_attempt, ensure_can_attempt
from ieee_quiz.errors import MalformedSubmission
from ieee_quiz.identity import RequestContext
from ieee_quiz.models import (
    AttemptResult, EligibilityResponse, PublicQuestion, QuizSubmission, UserRecord,
)
from ieee_quiz.questions import QuestionBank, get_question_bank
from ieee_quiz.scoring import apply_attempt, score_answers
from ieee_quiz.store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/quiz", tags=["quiz"])


def parse_submission(raw: Any) -> QuizSubmission:
    """Validate a submission payload before anything is scored."""
    try:
        submission = QuizSubmission.model_validate(raw)
    except ValidationError as e:
        raise MalformedSubmission([
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ])

    seen = set()
    for answer in submission.answers:
        if answer.question_id in seen:
            raise MalformedSubmission([f"answers: questionId {answer.question_id} answered more than once"])
        seen.add(answer.question_id)
    return submission


@router.get("/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    ctx: RequestContext = Depends(get_request_context),
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    """Whether the caller may take today's quiz."""
    if can_attempt(user.last_attempt_at, ctx.now, settings.quiz_tz()):
        return EligibilityResponse(can_take_quiz=True)
    return EligibilityResponse(
        can_take_quiz=False,
        message="You have already attempted today's quiz. Please try again tomorrow.",
        last_attempt=user.last_attempt_at,
    )


@router.get("/questions", response_model=list[PublicQuestion])
def get_questions(
    ctx: RequestContext = Depends(get_request_context),
    user: UserRecord = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
    bank: QuestionBank = Depends(get_question_bank),
    rng: random.Random = Depends(get_rng),
):
    """Today's questions in random order, without correct answers."""
    ensure_can_attempt(user, ctx.now, settings.quiz_tz())
    return bank.questions_for_attempt(rng)


@router.post("/submit", response_model=AttemptResult)
async def submit(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    user: UserRecord = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
    bank: QuestionBank = Depends(get_question_bank),
):
    """Score a submission and fold it into the caller's stats."""
    try:
        raw = await request.json()
    except ValueError:
        raise MalformedSubmission(["body: not valid JSON"])

    try:
        submission = parse_submission(raw)
    except MalformedSubmission as e:
        logger.warning("Rejected submission from %s: %s", ctx.user_id, e.details)
        raise

    ensure_can_attempt(user, ctx.now, settings.quiz_tz())

    score = score_answers(bank, submission.answers, submission.time_spent_seconds)

    # Read-merge-write; not atomic against a concurrent submission by the same user
    updated = apply_attempt(user, score, submission.time_spent_seconds, ctx.now)
    await run_in_threadpool(users.set, updated)

    logger.info(
        "User %s scored %d (%d/%d correct), +%d XP, badges=%s",
        ctx.user_id, score.raw_score, score.correct_count, score.total_questions,
        score.xp_earned, score.earned_badges,
    )

    return AttemptResult(
        raw_score=score.raw_score,
        correct_count=score.correct_count,
        total_questions=score.total_questions,
        xp_earned=score.xp_earned,
        earned_badges=score.earned_badges,
        user=updated,
    )
