import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from fastapi import Request

from backoffice.app.core.logging import get_log_context, get_logger
from backoffice.app.exceptions import AuthenticationError
from backoffice.app.services.identity import TokenVerificationError, TokenVerifier

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


class AuthFailure(str, Enum):
    """Why an admin token was rejected."""
    MISSING_HEADER = "missing_header"
    MALFORMED_TOKEN = "malformed_token"
    VERIFICATION_FAILED = "verification_failed"
    STALE_TOKEN = "stale_token"
    NOT_AUTHORIZED = "not_authorized"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an admin authentication attempt."""
    success: bool
    uid: Optional[str] = None
    email: Optional[str] = None
    failure: Optional[AuthFailure] = None

    @classmethod
    def ok(cls, uid: str, email: str) -> "AuthResult":
        return cls(success=True, uid=uid, email=email)

    @classmethod
    def fail(cls, failure: AuthFailure, email: Optional[str] = None) -> "AuthResult":
        return cls(success=False, email=email, failure=failure)


@dataclass(frozen=True)
class AdminPrincipal:
    """The verified admin behind a request."""
    uid: str
    email: str


class AdminAllowList:
    """Immutable, case-insensitive set of admin emails."""

    def __init__(self, emails: Iterable[str]):
        self._emails = frozenset(
            email.strip().lower() for email in emails if email and email.strip()
        )

    def __contains__(self, email: object) -> bool:
        if not isinstance(email, str):
            return False
        return email.strip().lower() in self._emails

    def __len__(self) -> int:
        return len(self._emails)


def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    Returns:
        The token string (possibly empty) if the scheme matches, None otherwise
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):].strip()


class AdminAuthenticator:
    """Verify admin bearer tokens.

    Checks run cheapest first: header scheme, token length, provider
    verification, token age from ``iat``, then allow-list membership. The
    provider call never raises out of ``authenticate``; every rejection is
    returned as a tagged AuthResult.
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        allow_list: AdminAllowList,
        *,
        min_token_length: int = 100,
        max_token_age_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self.verifier = verifier
        self.allow_list = allow_list
        self.min_token_length = min_token_length
        self.max_token_age_seconds = max_token_age_seconds
        self._clock = clock

    async def authenticate(self, authorization: Optional[str]) -> AuthResult:
        token = get_bearer_token(authorization)
        if token is None:
            return AuthResult.fail(AuthFailure.MISSING_HEADER)

        # Cheap reject before the provider round trip
        if len(token) < self.min_token_length:
            return AuthResult.fail(AuthFailure.MALFORMED_TOKEN)

        try:
            claims = await self.verifier.verify(token)
        except TokenVerificationError as exc:
            logger.info(f"Token verification failed: {exc.code}")
            return AuthResult.fail(AuthFailure.VERIFICATION_FAILED)
        except Exception:
            logger.exception("Unexpected error during token verification")
            return AuthResult.fail(AuthFailure.VERIFICATION_FAILED)

        email = claims.get("email")
        email = email if isinstance(email, str) else None

        issued_at = claims.get("iat")
        if not isinstance(issued_at, (int, float)) or isinstance(issued_at, bool):
            return AuthResult.fail(AuthFailure.STALE_TOKEN, email)
        token_age = self._clock() - issued_at
        if token_age > self.max_token_age_seconds:
            logger.warning(
                f"Token too old: {int(token_age)}s",
                extra=get_log_context(admin_email=email, auth_failure=AuthFailure.STALE_TOKEN.value),
            )
            return AuthResult.fail(AuthFailure.STALE_TOKEN, email)

        if email is None or email not in self.allow_list:
            logger.warning(
                f"Non-admin access attempt: {email}",
                extra=get_log_context(admin_email=email, auth_failure=AuthFailure.NOT_AUTHORIZED.value),
            )
            return AuthResult.fail(AuthFailure.NOT_AUTHORIZED, email)

        return AuthResult.ok(uid=str(claims["sub"]), email=email)

    async def verify_admin(self, authorization: Optional[str]) -> Optional[str]:
        """Return the admin's uid, or None for any kind of rejection."""
        result = await self.authenticate(authorization)
        return result.uid if result.success else None


def get_authenticator(request: Request) -> AdminAuthenticator:
    """Return the authenticator owned by the running application."""
    return request.app.state.authenticator


async def require_admin(request: Request) -> AdminPrincipal:
    """Validate the admin bearer token for protected endpoints.

    Raises:
        AuthenticationError: 401 for every failure cause
    """
    authenticator = get_authenticator(request)
    result = await authenticator.authenticate(request.headers.get("Authorization"))

    if not result.success:
        logger.warning(
            "Admin authentication failed",
            extra=get_log_context(
                request_id=getattr(request.state, "request_id", None),
                path=request.url.path,
                method=request.method,
                auth_failure=result.failure.value if result.failure else None,
                admin_email=result.email,
            ),
        )
        raise AuthenticationError(failure=result.failure.value if result.failure else None)

    principal = AdminPrincipal(uid=result.uid, email=result.email)
    request.state.admin = principal
    return principal
