"""
Tests for the Grader

Scoring of answer sheets against a package questionnaire and the ATEC shape check.
"""

import random

import pytest

from atec.core.schemas import INVALID_INDICATION, PackageCreate, indication_for, total_score
from atec.core.template import ATEC_MAX_SCORE, ATEC_TEMPLATE
from atec.services.grader import GradingError, ensure_all_questions_answered, grade


def as_answers(sheet):
    """Int-keyed copy of a string-keyed sheet."""
    return {int(s): {int(q): o for q, o in answers.items()} for s, answers in sheet.items()}


class TestTemplate:
    """Test the compiled-in ATEC shape."""

    def test_subtest_counts(self):
        assert [t.question_count for t in ATEC_TEMPLATE.values()] == [14, 20, 18, 25]
        assert [t.option_count for t in ATEC_TEMPLATE.values()] == [3, 3, 3, 4]

    def test_maximum_score(self):
        """14*2 + 20*2 + 18*2 + 25*3."""
        assert ATEC_MAX_SCORE == 179


class TestEnsureAllQuestionsAnswered:
    """Test the answer sheet shape check."""

    def test_complete_sheet_passes(self, answer_sheet):
        ensure_all_questions_answered(as_answers(answer_sheet(0)))

    def test_missing_subtest_names_it(self, answer_sheet):
        answers = as_answers(answer_sheet(0))
        del answers[2]

        with pytest.raises(GradingError, match=r"subtest 2 \(Sensory/Cognitive Awareness\)"):
            ensure_all_questions_answered(answers)

    def test_wrong_answer_count(self, answer_sheet):
        answers = as_answers(answer_sheet(0))
        del answers[0][13]

        with pytest.raises(GradingError, match="expecting 14 answers, but got 13"):
            ensure_all_questions_answered(answers)

    def test_unknown_subtest_rejected(self, answer_sheet):
        answers = as_answers(answer_sheet(0))
        answers[9] = {0: 0}

        with pytest.raises(GradingError, match="unknown subtest ids"):
            ensure_all_questions_answered(answers)


class TestGrade:
    """Test grading."""

    def test_all_lowest_options_score_zero(self, package_create: PackageCreate, answer_sheet):
        result = grade(package_create.questionnaire, as_answers(answer_sheet(0)))

        assert {subtest_id: r.grade for subtest_id, r in result.items()} == {0: 0, 1: 0, 2: 0, 3: 0}

    def test_grades_sum_option_scores(self, package_create: PackageCreate, answer_sheet):
        result = grade(package_create.questionnaire, as_answers(answer_sheet(1)))

        assert result[0].grade == 14
        assert result[1].grade == 20
        assert result[2].grade == 18
        assert result[3].grade == 25
        assert result[0].name == "Speech/Language/Communication"

    def test_highest_options_reach_maximum(self, package_create: PackageCreate, answer_sheet):
        answers = as_answers(answer_sheet(2))
        answers[3] = {q: 3 for q in range(25)}

        result = grade(package_create.questionnaire, answers)

        assert sum(r.grade for r in result.values()) == ATEC_MAX_SCORE

    def test_invalid_option_rejected(self, package_create: PackageCreate, answer_sheet):
        answers = as_answers(answer_sheet(0))
        answers[1][4] = 99

        with pytest.raises(GradingError, match="answer with id: 99 is not a valid option"):
            grade(package_create.questionnaire, answers)

    def test_fourth_option_only_valid_in_last_subtest(self, package_create, answer_sheet):
        answers = as_answers(answer_sheet(0))
        answers[0][0] = 3

        with pytest.raises(GradingError, match="subtest 0, question 0"):
            grade(package_create.questionnaire, answers)

    def test_scores_follow_option_scores_not_ids(self, package_payload, answer_sheet):
        """Option ids are opaque; only the score counts."""
        options = package_payload["questionnaire"]["0"]["options"]
        package_payload["questionnaire"]["0"]["options"] = [
            {"id": 10 + o["id"], "description": o["description"], "score": 2 - o["score"]}
            for o in options
        ]
        package = PackageCreate.model_validate(package_payload)
        answers = as_answers(answer_sheet(0))
        answers[0] = {q: 10 for q in range(14)}

        result = grade(package.questionnaire, answers)

        assert result[0].grade == 28


class TestIndicationCoverage:
    """Every compatible answer sheet lands in one of the package's bands."""

    @staticmethod
    def mixed_answers(pick) -> dict[int, dict[int, int]]:
        return {
            subtest_id: {
                q: pick(subtest_id, q, template.option_count)
                for q in range(template.question_count)
            }
            for subtest_id, template in ATEC_TEMPLATE.items()
        }

    @pytest.mark.parametrize("seed", range(12))
    def test_random_sheets_have_an_indication(self, package_create: PackageCreate, seed):
        rng = random.Random(seed)
        answers = self.mixed_answers(lambda s, q, n: rng.randrange(n))

        total = total_score(grade(package_create.questionnaire, answers))

        assert 0 <= total <= ATEC_MAX_SCORE
        assert indication_for(package_create.indication_categories, total) != INVALID_INDICATION

    @pytest.mark.parametrize(
        "pick",
        [
            lambda s, q, n: q % n,
            lambda s, q, n: (n - 1) if s == 3 else 0,
            lambda s, q, n: (n - 1) if q % 2 else 0,
            lambda s, q, n: min(s, n - 1),
        ],
        ids=["cycling", "last-subtest-maxed", "alternating", "by-subtest"],
    )
    def test_patterned_sheets_have_an_indication(self, package_create: PackageCreate, pick):
        total = total_score(grade(package_create.questionnaire, self.mixed_answers(pick)))

        assert indication_for(package_create.indication_categories, total) != INVALID_INDICATION

    def test_band_edges(self, package_create: PackageCreate):
        categories = package_create.indication_categories

        assert indication_for(categories, 30).name == "mild"
        assert indication_for(categories, 31).name == "moderate"
        assert indication_for(categories, 51).name == "severe"
        assert indication_for(categories, ATEC_MAX_SCORE).name == "severe"
        assert indication_for(categories, ATEC_MAX_SCORE + 1) == INVALID_INDICATION
