"""
Tests for the Result Card Renderer
"""

import io
from datetime import UTC, datetime
from uuid import uuid4

from PIL import Image

from atec.core.schemas import ImageResultAttributeKey, IndicationCategory, SubtestGrade
from atec.services import ResultImageRenderer
from atec.services.result_image import MAX_IMAGE_WIDTH, OPTIMUM_TEXT_LENGTH

KEYS = ImageResultAttributeKey(
    title="ATEC Result",
    total="Total",
    indication="Indication",
    result_id="Result ID",
    submitted_at="Submitted At",
)

CATEGORIES = [
    IndicationCategory(minimum_score=0, maximum_score=30, name="mild", detail="mild symptoms"),
    IndicationCategory(minimum_score=31, maximum_score=179, name="severe", detail="x " * 60),
]

RESULT = {
    0: SubtestGrade(name="Speech/Language/Communication", grade=4),
    1: SubtestGrade(name="Sociability", grade=6),
    2: SubtestGrade(name="Sensory/Cognitive Awareness", grade=3),
    3: SubtestGrade(name="Health/Physical/Behavior", grade=10),
}


class TestResultImageRenderer:
    """Test card text layout and PNG output."""

    def test_lines_list_subtests_then_summary(self):
        result_id = uuid4()
        lines = ResultImageRenderer().lines(
            keys=KEYS,
            result=RESULT,
            categories=CATEGORIES,
            result_id=result_id,
            submitted_at=datetime(2024, 5, 1, 9, 30, tzinfo=UTC),
        )

        assert lines[0] == "Speech/Language/Communication: 4"
        assert lines[3] == "Health/Physical/Behavior: 10"
        assert lines[4] == "Total : 23"
        assert lines[5] == "Indication : mild symptoms"
        assert lines[6] == f"Result ID : {result_id}"
        assert lines[7] == "Submitted At : 2024-05-01 09:30:00"

    def test_long_lines_are_wrapped(self):
        heavy = dict(RESULT)
        heavy[3] = SubtestGrade(name="Health/Physical/Behavior", grade=60)

        lines = ResultImageRenderer().lines(
            keys=KEYS,
            result=heavy,
            categories=CATEGORIES,
            result_id=uuid4(),
            submitted_at=datetime.now(UTC),
        )

        assert all(len(line) <= OPTIMUM_TEXT_LENGTH for line in lines)
        assert sum(1 for line in lines if line.startswith("x")) >= 1

    def test_render_produces_png(self):
        content = ResultImageRenderer().render(
            keys=KEYS,
            result=RESULT,
            categories=CATEGORIES,
            result_id=uuid4(),
            submitted_at=datetime.now(UTC),
        )

        image = Image.open(io.BytesIO(content))
        assert image.format == "PNG"
        assert 0 < image.width <= MAX_IMAGE_WIDTH
        assert image.height > 0
