from backend.cerebro.models import DifficultyLevel
from backend.cerebro.prompts import build_question_prompt, percent


def _prompt(**overrides):
    params = dict(
        level="2º ESO",
        subject="Matemáticas",
        difficulty=DifficultyLevel.MEDIUM,
        competency="STEM - Razonamiento matemático aplicado",
        accuracy=0.66,
        streak=2,
        recent_topics="",
    )
    params.update(overrides)
    return build_question_prompt(**params)


def test_prompt_is_deterministic():
    assert _prompt() == _prompt()
    assert _prompt(recent_topics="Fracciones") == _prompt(recent_topics="Fracciones")


def test_prompt_carries_student_context():
    prompt = _prompt()
    assert "- Nivel educativo: 2º ESO" in prompt
    assert "- Asignatura: Matemáticas" in prompt
    assert "- Rendimiento promedio: 66%" in prompt
    assert "- Dificultad objetivo: medio" in prompt
    assert "- Competencia LOMLOE: STEM - Razonamiento matemático aplicado" in prompt


def test_empty_recent_topics_suppresses_avoid_clause():
    prompt = _prompt(recent_topics="")
    assert "EVITA REPETIR" not in prompt
    assert "DIFERENTE" not in prompt


def test_recent_topics_are_listed_when_present():
    prompt = _prompt(recent_topics="Fracciones, Ecuaciones")
    assert "- Temas recientes (EVITA REPETIR): Fracciones, Ecuaciones" in prompt
    assert "DIFERENTE" in prompt


def test_prompt_forbids_non_text_media():
    prompt = _prompt()
    assert "NO hagas referencia a imágenes, diagramas" in prompt


def test_prompt_embeds_output_contract():
    prompt = _prompt(difficulty=DifficultyLevel.HARD, competency="CC - Pensamiento histórico crítico")
    for field in ('"question"', '"options"', '"correctIndex"', '"explanation"', '"topic"'):
        assert field in prompt
    assert '"difficulty": "difícil"' in prompt
    assert '"lomloeCompetency": "CC - Pensamiento histórico crítico"' in prompt
    assert "exactamente 4" in prompt


def test_streak_wording():
    assert "3 aciertos consecutivos" in _prompt(streak=3)
    assert "2 fallos consecutivos" in _prompt(streak=-2)


def test_percent_rounds_half_up():
    assert percent(0.125) == 13
    assert percent(0.5) == 50
    assert percent(2 / 3) == 67
