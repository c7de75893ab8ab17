"""
Pydantic Schemas

Request/response validation and domain value types.
"""

from .auth import (
    InitResetPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from .children import (
    ChildCreate,
    ChildRecord,
    ChildSearch,
    ChildStatistic,
    ChildUpdate,
    ChildWithParent,
)
from .common import ErrorResponse, MessageData, SuccessResponse
from .packages import (
    ActivePackage,
    PackageActivation,
    PackageContent,
    PackageCreate,
    PackageCreated,
    PackageRecord,
    PackageUpdate,
)
from .questionnaire import (
    INVALID_INDICATION,
    AnswerDetail,
    AnswerOption,
    ChecklistGroup,
    ImageResultAttributeKey,
    IndicationCategory,
    Questionnaire,
    ResultDetail,
    SubtestGrade,
    indication_for,
    total_score,
)
from .results import (
    RenderedResult,
    ResultCreate,
    ResultRecord,
    ResultSearch,
    SubmitQuestionnaire,
    SubmitQuestionnaireResult,
)
from .users import UserCreate, UserProfile, UserRecord

__all__ = [
    # Auth
    "SignupRequest",
    "ResendVerificationRequest",
    "LoginRequest",
    "LoginResponse",
    "InitResetPasswordRequest",
    "ResetPasswordRequest",
    # Users
    "UserCreate",
    "UserRecord",
    "UserProfile",
    # Children
    "ChildCreate",
    "ChildUpdate",
    "ChildRecord",
    "ChildWithParent",
    "ChildSearch",
    "ChildStatistic",
    # Questionnaire
    "AnswerOption",
    "ChecklistGroup",
    "Questionnaire",
    "IndicationCategory",
    "INVALID_INDICATION",
    "indication_for",
    "ImageResultAttributeKey",
    "AnswerDetail",
    "SubtestGrade",
    "ResultDetail",
    "total_score",
    # Packages
    "PackageContent",
    "PackageCreate",
    "PackageUpdate",
    "PackageActivation",
    "PackageRecord",
    "PackageCreated",
    "ActivePackage",
    # Results
    "ResultCreate",
    "ResultRecord",
    "SubmitQuestionnaire",
    "SubmitQuestionnaireResult",
    "ResultSearch",
    "RenderedResult",
    # Envelopes
    "SuccessResponse",
    "ErrorResponse",
    "MessageData",
]
