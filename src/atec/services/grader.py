"""
Grader

Pure scoring of an answer sheet against a package questionnaire.
"""

from atec.core.schemas import AnswerDetail, Questionnaire, ResultDetail, SubtestGrade
from atec.core.template import ATEC_TEMPLATE


class GradingError(Exception):
    """Answer sheet can't be graded; message is shown to the submitter."""

    pass


def ensure_all_questions_answered(answers: AnswerDetail) -> None:
    """
    Check the answer sheet's shape against the ATEC template.

    Every template subtest must be present with exactly the template's
    number of answers; no other subtest may appear.

    Raises:
        GradingError: On the first mismatch
    """
    for subtest_id, template in ATEC_TEMPLATE.items():
        sheet = answers.get(subtest_id)
        if sheet is None:
            raise GradingError(f"subtest {subtest_id} ({template.name}) is missing answers")

        if len(sheet) != template.question_count:
            raise GradingError(
                f"subtest {subtest_id} ({template.name}) is expecting "
                f"{template.question_count} answers, but got {len(sheet)}"
            )

    unknown = sorted(set(answers) - set(ATEC_TEMPLATE))
    if unknown:
        raise GradingError(f"answers contain unknown subtest ids: {unknown}")


def grade(questionnaire: Questionnaire, answers: AnswerDetail) -> ResultDetail:
    """
    Grade answers against questionnaire.

    Each subtest's grade is the sum of the scores of the chosen options.

    Args:
        questionnaire: Package questionnaire (subtest id -> checklist group)
        answers: Subtest id -> (question index -> option id)

    Returns:
        Subtest id -> {name, grade}

    Raises:
        GradingError: If a subtest has no answers or an answer isn't one of its options
    """
    result: ResultDetail = {}

    for subtest_id, group in sorted(questionnaire.items()):
        sheet = answers.get(subtest_id)
        if sheet is None:
            raise GradingError(f"missing answers for subtest {subtest_id} ({group.custom_name})")

        total = 0
        for question_index, option_id in sheet.items():
            option = group.find_option(option_id)
            if option is None:
                raise GradingError(
                    f"answer with id: {option_id} is not a valid option "
                    f"(subtest {subtest_id}, question {question_index})"
                )
            total += option.score

        result[subtest_id] = SubtestGrade(name=group.custom_name, grade=total)

    return result
