"""Unit tests for scoring.normalizer."""

from __future__ import annotations

import pytest

from ppm_survey.catalog import QuestionType
from ppm_survey.scoring.normalizer import is_answered, max_for, normalize


@pytest.mark.parametrize(
    "answer,expected",
    [("4", 4), ("5", 5), ("9", 5), ("-2", 0), ("abc", 0), ("3 - neutro", 3)],
)
def test_scale_1_5(answer, expected):
    assert normalize(answer, "escala_1_5") == expected


def test_scale_0_10_has_max_10():
    assert normalize("8", "escala_0_10") == 8
    assert max_for("escala_0_10") == 10
    assert max_for("escala_1_5") == 5


@pytest.mark.parametrize(
    "answer,expected",
    [("Sim", 5), ("Parcialmente", 3), ("Não", 1), ("talvez", 0), ("", 0)],
)
def test_yes_no_family(answer, expected):
    for qtype in ("sim/não", "sim/não_(pergunta_filtro)"):
        assert normalize(answer, qtype) == expected


def test_partially_scores_sixty_percent():
    qtype = QuestionType.YES_NO_PARTIAL.value
    assert normalize("Parcialmente", qtype) / max_for(qtype) == pytest.approx(0.6)


def test_multi_select_counts_and_caps():
    assert normalize(["A", "B", "C"], "multipla") == 3
    assert normalize(list("ABCDEFG"), "multipla") == 5
    assert normalize("A;B", "multipla") == 2
    assert normalize("A;B;C;D;E;F", "multipla") == 5


def test_presence_bonus_for_other_types():
    assert normalize("Um comentário", "texto") == 3
    assert normalize("   ", "texto") == 0
    assert normalize("Gerente_de_Projeto", QuestionType.ROLE.value) == 3


@pytest.mark.parametrize("qtype", [t.value for t in QuestionType])
def test_unanswered_is_zero_and_bounded(qtype):
    assert normalize(None, qtype) == 0
    assert normalize("", qtype) == 0
    assert normalize([], qtype) == 0
    assert 0 <= normalize("10", qtype) <= max_for(qtype)
    assert 0 <= normalize(["Sim"] * 9, qtype) <= max_for(qtype)


def test_is_answered():
    assert not is_answered(None)
    assert not is_answered("")
    assert not is_answered([])
    assert is_answered("0")
    assert is_answered(["x"])
