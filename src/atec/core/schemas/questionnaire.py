"""
Questionnaire Domain Schemas

Value types owned by a package (questionnaire, scoring bands, image labels)
and the answer/result shapes produced when a sheet is graded.

JSON object keys are strings; the int-keyed mappings below accept either form
so the same models read request bodies, database JSON and cached snapshots.
"""

from pydantic import BaseModel, Field


class AnswerOption(BaseModel):
    """One selectable answer within a checklist group."""

    id: int
    description: str
    score: int


class ChecklistGroup(BaseModel):
    """Content of one subtest: display name, questions and answer options."""

    custom_name: str
    questions: list[str]
    options: list[AnswerOption]

    def find_option(self, option_id: int) -> AnswerOption | None:
        """Option with the given id, if any."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None


# subtest_id -> ChecklistGroup
Questionnaire = dict[int, ChecklistGroup]


class IndicationCategory(BaseModel):
    """Named score band translating a total score into a textual indication."""

    minimum_score: int
    maximum_score: int
    name: str
    detail: str

    def contains(self, score: int) -> bool:
        """Check if score falls inside this band (inclusive)."""
        return self.minimum_score <= score <= self.maximum_score


INVALID_INDICATION = IndicationCategory(
    minimum_score=0, maximum_score=0, name="invalid value", detail="invalid indication"
)


def indication_for(categories: list[IndicationCategory], score: int) -> IndicationCategory:
    """Find the band containing score; falls back to INVALID_INDICATION."""
    for category in categories:
        if category.contains(score):
            return category
    return INVALID_INDICATION


class ImageResultAttributeKey(BaseModel):
    """Labels printed on the rendered result card."""

    title: str
    total: str
    indication: str
    result_id: str
    submitted_at: str


# subtest_id -> (question_index -> option_id)
AnswerDetail = dict[int, dict[int, int]]


class SubtestGrade(BaseModel):
    """Grade of one subtest."""

    name: str
    grade: int = Field(ge=0)


# subtest_id -> SubtestGrade
ResultDetail = dict[int, SubtestGrade]


def total_score(result: ResultDetail) -> int:
    """Sum of subtest grades."""
    return sum(subtest.grade for subtest in result.values())
