"""
ATEC Template

The fixed shape of the Autism Treatment Evaluation Checklist. Packages may
re-label subtests, questions and options, but must match these counts.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SubtestTemplate:
    """Shape of one ATEC subtest."""

    name: str
    question_count: int
    option_count: int

    @property
    def max_grade(self) -> int:
        """Highest grade reachable when option scores are 0..option_count-1."""
        return self.question_count * (self.option_count - 1)


ATEC_TEMPLATE: dict[int, SubtestTemplate] = {
    0: SubtestTemplate(name="Speech/Language/Communication", question_count=14, option_count=3),
    1: SubtestTemplate(name="Sociability", question_count=20, option_count=3),
    2: SubtestTemplate(name="Sensory/Cognitive Awareness", question_count=18, option_count=3),
    3: SubtestTemplate(name="Health/Physical/Behavior", question_count=25, option_count=4),
}

ATEC_MIN_SCORE = 0
ATEC_MAX_SCORE = sum(subtest.max_grade for subtest in ATEC_TEMPLATE.values())  # 179

MIN_INDICATION_CATEGORIES = 3
