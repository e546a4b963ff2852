import pytest

from backend.cerebro.difficulty import (
    GENERAL_COMPETENCY,
    LOMLOE_COMPETENCIES,
    adaptive_reason,
    estimate_difficulty,
    recent_topics,
    resolve_competency,
)
from backend.cerebro.models import DifficultyLevel, PerformanceSignal, QuestionRecord


def _signal(accuracy=None, streak=None):
    return PerformanceSignal.model_validate({"accuracy": accuracy, "streak": streak})


@pytest.mark.parametrize(
    "accuracy,streak",
    [(0.81, 3), (0.95, 10), (1.0, 3)],
)
def test_high_accuracy_with_streak_is_hard(accuracy, streak):
    assert estimate_difficulty(_signal(accuracy, streak)) is DifficultyLevel.HARD


@pytest.mark.parametrize(
    "accuracy,streak",
    [(0.49, 0), (0.2, 5), (0.7, -1), (0.9, -2), (0.0, 0)],
)
def test_low_accuracy_or_losing_streak_is_easy(accuracy, streak):
    assert estimate_difficulty(_signal(accuracy, streak)) is DifficultyLevel.EASY


@pytest.mark.parametrize(
    "accuracy,streak",
    [(0.8, 3), (0.9, 2), (0.5, 0), (0.65, 1)],
)
def test_everything_else_is_medium(accuracy, streak):
    assert estimate_difficulty(_signal(accuracy, streak)) is DifficultyLevel.MEDIUM


def test_missing_signal_defaults_to_medium():
    assert estimate_difficulty(None) is DifficultyLevel.MEDIUM
    signal = _signal()
    assert signal.accuracy == 0.5
    assert signal.streak == 0
    assert estimate_difficulty(signal) is DifficultyLevel.MEDIUM


def test_explicit_zero_accuracy_is_not_replaced_by_default():
    assert _signal(0, 0).accuracy == 0.0


def test_accuracy_is_clamped():
    assert _signal(1.7, 0).accuracy == 1.0
    assert _signal(-0.3, 0).accuracy == 0.0


def test_difficulty_order_and_aliases():
    assert DifficultyLevel.EASY < DifficultyLevel.MEDIUM < DifficultyLevel.HARD
    assert DifficultyLevel("hard") is DifficultyLevel.HARD
    assert DifficultyLevel("Dificil") is DifficultyLevel.HARD
    assert DifficultyLevel("EASY") is DifficultyLevel.EASY
    assert DifficultyLevel.coerce("imposible") is DifficultyLevel.MEDIUM
    assert DifficultyLevel.coerce(None) is DifficultyLevel.MEDIUM
    assert DifficultyLevel.coerce(None, default=DifficultyLevel.HARD) is DifficultyLevel.HARD
    assert DifficultyLevel.coerce("easy", default=DifficultyLevel.HARD) is DifficultyLevel.EASY


def test_adaptive_reason_follows_difficulty():
    assert adaptive_reason(DifficultyLevel.HARD).startswith("Alto rendimiento")
    assert adaptive_reason(DifficultyLevel.EASY).startswith("Bajo rendimiento")
    assert adaptive_reason(DifficultyLevel.MEDIUM).startswith("Rendimiento estable")


def test_competency_table_is_total():
    for subject, tiers in LOMLOE_COMPETENCIES.items():
        assert set(tiers) == set(DifficultyLevel)
        for level in DifficultyLevel:
            tag = resolve_competency(subject, level)
            assert tag and tag != GENERAL_COMPETENCY


def test_competency_lookup():
    assert resolve_competency("Matemáticas", DifficultyLevel.HARD) == "STEM - Modelización y pensamiento abstracto"
    assert resolve_competency("Historia", DifficultyLevel.EASY) == "CC - Conocimiento histórico fundamental"


def test_competency_accepts_english_and_unaccented_subjects():
    assert resolve_competency("Mathematics", DifficultyLevel.EASY) == "STEM - Resolución de problemas básicos"
    assert resolve_competency("ingles", DifficultyLevel.MEDIUM) == "CCL - Comunicación en inglés aplicada"


@pytest.mark.parametrize("subject", ["Filosofía", "", None, "Música"])
def test_unknown_subject_falls_back(subject):
    for level in DifficultyLevel:
        assert resolve_competency(subject, level) == GENERAL_COMPETENCY


def test_recent_topics_empty_history():
    assert recent_topics(None) == ""
    assert recent_topics([]) == ""


def test_recent_topics_keeps_last_five_in_order():
    history = [QuestionRecord(topic=f"t{i}", difficulty="medio", correct=True) for i in range(1, 8)]
    assert recent_topics(history) == "t3, t4, t5, t6, t7"


def test_recent_topics_skips_records_without_topic():
    history = [
        QuestionRecord(topic="Fracciones", correct=True),
        QuestionRecord(topic=None, correct=False),
        QuestionRecord(topic="  ", correct=False),
        QuestionRecord(topic="Porcentajes", correct=True),
    ]
    assert recent_topics(history) == "Fracciones, Porcentajes"
