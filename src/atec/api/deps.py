"""
API Dependencies

Service lookup, principal extraction from the Authorization header, and rate limiting.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import Depends, Header, Request

from atec.container import Container
from atec.core.auth_context import Principal
from atec.core.errors import UsecaseError
from atec.services import AuthService, ChildService, PackageService, QuestionnaireService, UserService


def get_container(request: Request) -> Container:
    container: Container = request.app.state.container
    return container


def get_auth_service(container: Container = Depends(get_container)) -> AuthService:
    return container.auth


def get_package_service(container: Container = Depends(get_container)) -> PackageService:
    return container.packages


def get_questionnaire_service(
    container: Container = Depends(get_container),
) -> QuestionnaireService:
    return container.questionnaires


def get_child_service(container: Container = Depends(get_container)) -> ChildService:
    return container.children


def get_user_service(container: Container = Depends(get_container)) -> UserService:
    return container.users


def extract_access_token(authorization: str | None) -> str | None:
    """The raw token from an Authorization header.

    The header carries exactly one token with no scheme prefix; anything else
    (including "Bearer <token>") counts as no token.
    """
    if not authorization:
        return None

    parts = authorization.strip().split(" ")
    if len(parts) != 1 or not parts[0]:
        return None
    return parts[0]


def get_optional_principal(
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> Principal | None:
    """Principal for the request; None when no token was sent.

    A token that is present but invalid is rejected with 401.
    """
    token = extract_access_token(authorization)
    if token is None:
        return None
    return auth.authenticate_access_token(token)


def get_principal(principal: Principal | None = Depends(get_optional_principal)) -> Principal:
    """Principal for routes that never allow anonymous access."""
    if principal is None:
        raise UsecaseError.unauthorized("missing required auth token")
    return principal


async def limit_submissions(
    request: Request,
    principal: Principal | None = Depends(get_optional_principal),
    container: Container = Depends(get_container),
) -> None:
    """Throttle questionnaire submissions per principal (or client address)."""
    if principal is not None:
        identity = f"user:{principal.user_id}"
    else:
        identity = f"ip:{request.client.host if request.client else 'unknown'}"

    decision = await container.rate_limiter.reserve(
        "submit-questionnaire",
        identity,
        limit=container.settings.SUBMIT_RATE_LIMIT,
        period=container.settings.SUBMIT_RATE_PERIOD_SECONDS,
    )
    if not decision.allowed:
        raise UsecaseError.too_many_requests(
            f"too many submissions, retry in {decision.retry_after} seconds"
        )
