"""
Package validation functions for ATEC.

All validation functions follow the pattern:
1. Accept a parsed package component
2. Check it against the compiled-in ATEC template and the authoring rules
3. Return nothing or raise ValidationError with a user-actionable message
"""

from atec.core.schemas import (
    ChecklistGroup,
    ImageResultAttributeKey,
    IndicationCategory,
    PackageContent,
    Questionnaire,
)
from atec.core.template import (
    ATEC_MAX_SCORE,
    ATEC_MIN_SCORE,
    ATEC_TEMPLATE,
    MIN_INDICATION_CATEGORIES,
)


class ValidationError(Exception):
    """Raised when package content fails validation."""

    pass


# ============================================================================
# Checklist Group Validation
# ============================================================================


def validate_checklist_group(group: ChecklistGroup) -> None:
    """
    Validate one subtest's content on its own.

    Rules:
    - custom_name non-empty
    - at least one question, none blank
    - at least one option
    - option ids unique, option scores unique and non-negative
    - option scores cover exactly 0..len(options)-1

    Args:
        group: Checklist group to check

    Raises:
        ValidationError: If any rule is broken
    """
    if not group.custom_name.strip():
        raise ValidationError("custom_name is required")

    if not group.questions:
        raise ValidationError(f"{group.custom_name} must have at least one question")

    if any(not question.strip() for question in group.questions):
        raise ValidationError(f"{group.custom_name} has an empty question")

    if not group.options:
        raise ValidationError(f"{group.custom_name} must have at least one option")

    ids = [option.id for option in group.options]
    if len(set(ids)) != len(ids):
        raise ValidationError(f"{group.custom_name} option ids must be unique")

    scores = [option.score for option in group.options]
    if any(score < 0 for score in scores):
        raise ValidationError(f"{group.custom_name} option scores must not be negative")

    if len(set(scores)) != len(scores):
        raise ValidationError(f"{group.custom_name} option scores must be unique")

    if any(not option.description.strip() for option in group.options):
        raise ValidationError(f"{group.custom_name} has an option without description")

    # unique + non-negative, so this pins scores to exactly 0..n-1
    if max(scores) != len(scores) - 1:
        raise ValidationError(
            f"{group.custom_name} option scores must range from 0 to {len(scores) - 1}"
        )


# ============================================================================
# Questionnaire Validation
# ============================================================================


def validate_questionnaire(questionnaire: Questionnaire) -> None:
    """
    Validate a questionnaire against the ATEC template.

    Args:
        questionnaire: Mapping of subtest id to checklist group

    Raises:
        ValidationError: If a subtest is missing, unknown, or has the wrong shape
    """
    unknown = sorted(set(questionnaire) - set(ATEC_TEMPLATE))
    if unknown:
        raise ValidationError(f"questionnaire has unknown subtest ids: {unknown}")

    for subtest_id, template in ATEC_TEMPLATE.items():
        group = questionnaire.get(subtest_id)
        if group is None:
            raise ValidationError(
                f"questionnaire group number {subtest_id + 1} for {template.name} is missing"
            )

        validate_checklist_group(group)

        if len(group.options) != template.option_count:
            raise ValidationError(
                f"questionnaire group number {subtest_id + 1} for {template.name} "
                f"expecting {template.option_count} number of options, "
                f"but got {len(group.options)}"
            )

        if len(group.questions) != template.question_count:
            raise ValidationError(
                f"questionnaire group number {subtest_id + 1} for {template.name} "
                f"expecting {template.question_count} number of questions, "
                f"but got {len(group.questions)}"
            )


# ============================================================================
# Indication Category Validation
# ============================================================================


def validate_indication_categories(categories: list[IndicationCategory]) -> None:
    """
    Validate score bands.

    Bands must be ascending, non-empty, within the ATEC score range, and every
    possible total must fall into exactly one band.

    Args:
        categories: Ordered list of indication categories

    Raises:
        ValidationError: If the bands are malformed, overlap, or leave gaps
    """
    if len(categories) < MIN_INDICATION_CATEGORIES:
        raise ValidationError(
            f"indication categories must have at least {MIN_INDICATION_CATEGORIES} entries"
        )

    for i, category in enumerate(categories):
        if not category.name.strip() or not category.detail.strip():
            raise ValidationError(f"indication category {i + 1} must have a name and detail")

        if category.minimum_score < ATEC_MIN_SCORE:
            raise ValidationError(
                f"indication category {category.name} minimum score must be >= {ATEC_MIN_SCORE}"
            )

        if category.maximum_score < 1 or category.maximum_score > ATEC_MAX_SCORE:
            raise ValidationError(
                f"indication category {category.name} maximum score must be "
                f"between 1 and {ATEC_MAX_SCORE}"
            )

        if category.minimum_score > category.maximum_score:
            raise ValidationError(
                f"indication category {category.name} minimum score exceeds its maximum score"
            )

        if i > 0 and category.minimum_score <= categories[i - 1].maximum_score:
            raise ValidationError(
                f"indication category {category.name} must start after "
                f"{categories[i - 1].name} ends"
            )

    for score in range(ATEC_MIN_SCORE, ATEC_MAX_SCORE + 1):
        matches = sum(1 for category in categories if category.contains(score))
        if matches == 0:
            raise ValidationError(f"score {score} does not belong to any indication category")
        if matches > 1:
            raise ValidationError(f"score {score} belongs to more than one indication category")


# ============================================================================
# Image Attribute Key Validation
# ============================================================================


def validate_image_result_attribute_key(keys: ImageResultAttributeKey) -> None:
    """
    Validate result card labels.

    Raises:
        ValidationError: If any label is blank
    """
    for field_name, value in keys.model_dump().items():
        if not value.strip():
            raise ValidationError(f"image result attribute key {field_name} is required")


# ============================================================================
# Package Validation
# ============================================================================


def validate_package(package: PackageContent) -> None:
    """
    Validate all content-bearing fields of a package.

    Raises:
        ValidationError: On the first broken rule
    """
    if not package.name.strip():
        raise ValidationError("package name is required")

    validate_questionnaire(package.questionnaire)
    validate_indication_categories(package.indication_categories)
    validate_image_result_attribute_key(package.image_result_attribute_key)
