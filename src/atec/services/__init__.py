"""
Use-case services.
"""

from .auth import AuthService
from .children import ChildService
from .packages import PackageService
from .questionnaire import QuestionnaireService
from .rate_limiter import RateLimitDecision, RedisRateLimiter
from .result_image import ResultImageRenderer
from .users import UserService

__all__ = [
    "AuthService",
    "ChildService",
    "PackageService",
    "QuestionnaireService",
    "RateLimitDecision",
    "RedisRateLimiter",
    "ResultImageRenderer",
    "UserService",
]
