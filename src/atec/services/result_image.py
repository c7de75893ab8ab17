"""
Result Card Renderer

Draws a graded result as a PNG: the title, one line per subtest, then the
total, indication, result id and submission time labelled with the package's
image attribute keys.
"""

from __future__ import annotations

import io
import textwrap
from datetime import datetime
from pathlib import Path
from uuid import UUID

from PIL import Image, ImageDraw, ImageFont

from atec.core.schemas import (
    ImageResultAttributeKey,
    IndicationCategory,
    ResultDetail,
    indication_for,
    total_score,
)

PNG_CONTENT_TYPE = "image/png"

OPTIMUM_TEXT_LENGTH = 65
MAX_IMAGE_WIDTH = 1080


class ResultImageRenderer:
    """Renders result cards with Pillow."""

    def __init__(
        self,
        font_path: Path | None = None,
        *,
        text_size: int = 20,
        title_size: int = 28,
        padding: int = 24,
        line_spacing: float = 1.5,
    ):
        self.text_font = self._load_font(font_path, text_size)
        self.title_font = self._load_font(font_path, title_size)
        self.padding = padding
        self.line_height = int(text_size * line_spacing)
        self.title_height = int(title_size * line_spacing)

    @staticmethod
    def _load_font(
        font_path: Path | None, size: int
    ) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if font_path is not None:
            return ImageFont.truetype(str(font_path), size)
        return ImageFont.load_default(size=size)

    def lines(
        self,
        *,
        keys: ImageResultAttributeKey,
        result: ResultDetail,
        categories: list[IndicationCategory],
        result_id: UUID,
        submitted_at: datetime,
    ) -> list[str]:
        """Text lines of the card body, wrapped at OPTIMUM_TEXT_LENGTH."""
        total = total_score(result)
        indication = indication_for(categories, total)

        raw = [f"{result[subtest_id].name}: {result[subtest_id].grade}" for subtest_id in sorted(result)]
        raw += [
            f"{keys.total} : {total}",
            f"{keys.indication} : {indication.detail}",
            f"{keys.result_id} : {result_id}",
            f"{keys.submitted_at} : {submitted_at:%Y-%m-%d %H:%M:%S}",
        ]

        wrapped: list[str] = []
        for line in raw:
            wrapped.extend(textwrap.wrap(line, OPTIMUM_TEXT_LENGTH) or [""])
        return wrapped

    def render(
        self,
        *,
        keys: ImageResultAttributeKey,
        result: ResultDetail,
        categories: list[IndicationCategory],
        result_id: UUID,
        submitted_at: datetime,
    ) -> bytes:
        """Render the card and return PNG bytes."""
        body = self.lines(
            keys=keys,
            result=result,
            categories=categories,
            result_id=result_id,
            submitted_at=submitted_at,
        )

        widest = max(
            [self.title_font.getlength(keys.title)]
            + [self.text_font.getlength(line) for line in body]
        )
        width = min(int(widest) + 2 * self.padding, MAX_IMAGE_WIDTH)
        height = 2 * self.padding + self.title_height + self.line_height * len(body)

        image = Image.new("RGB", (width, height), "white")
        draw = ImageDraw.Draw(image)

        y = self.padding
        title_x = max((width - self.title_font.getlength(keys.title)) / 2, self.padding)
        draw.text((title_x, y), keys.title, fill="black", font=self.title_font)
        y += self.title_height

        for line in body:
            x = max((width - self.text_font.getlength(line)) / 2, self.padding)
            draw.text((x, y), line, fill="black", font=self.text_font)
            y += self.line_height

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
