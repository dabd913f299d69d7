from datetime import datetime, timezone

from ieee_quiz.models import SubmittedAnswer, UserRecord
from ieee_quiz.scoring import AttemptScore, apply_attempt, score_answers, tier_badge

LADDER = {"Perfect Score", "IEEE Expert", "IEEE Scholar", "IEEE Enthusiast"}


def answer(question, correct=True):
    selected = question.correct_option_index if correct else (question.correct_option_index + 1) % 4
    return SubmittedAnswer(question_id=question.id, selected_option_index=selected)


def test_all_correct_fast_earns_perfect_score_and_speed_demon(bank):
    answers = [answer(q) for q in bank.questions]
    points = sum(q.points for q in bank.questions)

    result = score_answers(bank, answers, 90)

    assert result.raw_score == points
    assert result.correct_count == 10
    assert result.total_questions == 10
    assert result.earned_badges == ["Perfect Score", "Speed Demon"]
    assert result.xp_earned == points * 2 + 100 + 30


def test_five_correct_slow_earns_enthusiast_only(bank):
    answers = [answer(q, correct=i < 5) for i, q in enumerate(bank.questions)]

    result = score_answers(bank, answers, 300)

    assert result.raw_score == 50
    assert result.correct_count == 5
    assert result.earned_badges == ["IEEE Enthusiast"]
    assert result.xp_earned == 110


def test_tier_ladder_is_exclusive():
    assert tier_badge(10, 10) == ("Perfect Score", 100)
    assert tier_badge(9, 10) == ("IEEE Expert", 50)
    assert tier_badge(8, 10) == ("IEEE Expert", 50)
    assert tier_badge(7, 10) == ("IEEE Scholar", 25)
    assert tier_badge(6, 10) == ("IEEE Scholar", 25)
    assert tier_badge(4, 10) == ("IEEE Enthusiast", 10)
    assert tier_badge(3, 10) is None
    assert tier_badge(0, 10) is None


def test_at_most_one_ladder_badge_for_any_count(bank):
    for correct in range(bank.total + 1):
        answers = [answer(q, correct=i < correct) for i, q in enumerate(bank.questions)]
        result = score_answers(bank, answers, 30)
        assert len(LADDER & set(result.earned_badges)) <= 1
        assert "Speed Demon" in result.earned_badges


def test_unknown_question_ids_are_ignored(bank):
    q = bank.questions[0]
    answers = [
        SubmittedAnswer(question_id=999, selected_option_index=0),
        answer(q),
    ]

    result = score_answers(bank, answers, 300)

    assert result.correct_count == 1
    assert result.raw_score == q.points


def test_no_answers(bank):
    result = score_answers(bank, [], 60)
    assert result.raw_score == 0
    assert result.correct_count == 0
    assert result.earned_badges == ["Speed Demon"]
    assert result.xp_earned == 30


def test_speed_demon_needs_truthy_time_under_two_minutes(bank):
    assert "Speed Demon" not in score_answers(bank, [], None).earned_badges
    assert "Speed Demon" not in score_answers(bank, [], 0).earned_badges
    assert "Speed Demon" not in score_answers(bank, [], 120).earned_badges
    assert "Speed Demon" in score_answers(bank, [], 119).earned_badges


def test_correct_count_bounded(bank):
    answers = [answer(q) for q in bank.questions[:3]]
    result = score_answers(bank, answers, None)
    assert result.correct_count <= len(answers)
    assert result.correct_count <= result.total_questions


def test_apply_attempt_merges_monotonically():
    now = datetime(2024, 10, 2, 12, 0, tzinfo=timezone.utc)
    user = UserRecord(id="u1", name="Ada", best_score=80, total_xp=200, badges=["IEEE Scholar", "Speed Demon"])
    score = AttemptScore(raw_score=40, correct_count=4, total_questions=10, xp_earned=90,
                         earned_badges=["IEEE Enthusiast", "Speed Demon"])

    updated = apply_attempt(user, score, 100, now)

    assert updated.best_score == 80
    assert updated.total_xp == 290
    assert updated.badges == ["IEEE Scholar", "Speed Demon", "IEEE Enthusiast"]
    assert updated.last_attempt_at == now
    assert updated.last_time_spent_seconds == 100
    # the input record is left untouched
    assert user.total_xp == 200
    assert user.last_attempt_at is None


def test_apply_attempt_raises_best_score():
    user = UserRecord(id="u1", name="Ada", best_score=30)
    score = AttemptScore(raw_score=75, xp_earned=0)

    updated = apply_attempt(user, score, None, datetime(2024, 10, 2, tzinfo=timezone.utc))

    assert updated.best_score == 75
    assert updated.last_time_spent_seconds is None
