from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ieee_quiz.models import SubmittedAnswer, UserRecord
from ieee_quiz.questions import QuestionBank

XP_PER_POINT = 2

PERFECT_SCORE_BADGE = "Perfect Score"
PERFECT_SCORE_XP = 100

# (minimum correct answers, badge, bonus XP), checked top-down below a perfect score
TIER_BADGES = [
    (8, "IEEE Expert", 50),
    (6, "IEEE Scholar", 25),
    (4, "IEEE Enthusiast", 10),
]

SPEED_DEMON_BADGE = "Speed Demon"
SPEED_DEMON_SECONDS = 120
SPEED_DEMON_XP = 30


@dataclass
class AttemptScore:
    raw_score: int = 0
    correct_count: int = 0
    total_questions: int = 0
    xp_earned: int = 0
    earned_badges: list[str] = field(default_factory=list)


def tier_badge(correct_count: int, total_questions: int) -> Optional[tuple[str, int]]:
    """The single ladder badge (and its bonus XP) for a correct-answer count, if any."""
    if correct_count == total_questions:
        return PERFECT_SCORE_BADGE, PERFECT_SCORE_XP
    for minimum, badge, bonus in TIER_BADGES:
        if correct_count >= minimum:
            return badge, bonus
    return None


def score_answers(
    bank: QuestionBank,
    answers: Iterable[SubmittedAnswer],
    time_spent_seconds: Optional[int] = None,
) -> AttemptScore:
    """
    Score one attempt. Correctness always comes from the bank; answers
    referencing unknown question ids are skipped.
    """
    result = AttemptScore(total_questions=bank.total)

    for answer in answers:
        question = bank.get(answer.question_id)
        if question is None:
            continue
        if answer.selected_option_index == question.correct_option_index:
            result.raw_score += question.points
            result.correct_count += 1
            result.xp_earned += question.points * XP_PER_POINT

    tier = tier_badge(result.correct_count, result.total_questions)
    if tier:
        badge, bonus = tier
        result.earned_badges.append(badge)
        result.xp_earned += bonus

    if time_spent_seconds and time_spent_seconds < SPEED_DEMON_SECONDS:
        result.earned_badges.append(SPEED_DEMON_BADGE)
        result.xp_earned += SPEED_DEMON_XP

    return result


def merge_badges(existing: list[str], earned: Iterable[str]) -> list[str]:
    merged = list(existing)
    for badge in earned:
        if badge not in merged:
            merged.append(badge)
    return merged


def apply_attempt(
    user: UserRecord,
    score: AttemptScore,
    time_spent_seconds: Optional[int],
    now: datetime,
) -> UserRecord:
    """Fold an attempt into the user's cumulative stats. Returns a new record."""
    return user.model_copy(update={
        "best_score": max(user.best_score, score.raw_score),
        "total_xp": user.total_xp + score.xp_earned,
        "badges": merge_badges(user.badges, score.earned_badges),
        "last_attempt_at": now,
        "last_time_spent_seconds": time_spent_seconds,
    })
