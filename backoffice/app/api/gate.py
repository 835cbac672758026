"""Request gate shared by every admin endpoint.

A route declares its gate as a dependency::

    @router.post("")
    async def create_faculty(
        ctx: Annotated[GateContext, Depends(RequestGate("write", rules=FACULTY_RULES))],
        session: SessionDep,
    ) -> dict:
        faculty = await ctx.store(crud.create_faculty(session, ctx.data["name"]), "Failed to create faculty")

The gate runs the checks in a fixed order and stops at the first failure:
rate limit (429), admin token (401), body size (413), JSON object body (400),
field rules (400). Authentication and body reading share one deadline (504).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Literal, Optional, TypeVar

from fastapi import Request

from backoffice.app.core.config import Settings, settings as default_settings
from backoffice.app.core.logging import get_log_context, get_logger
from backoffice.app.exceptions import (
    BackofficeException,
    BadRequestError,
    GateTimeoutError,
    PayloadTooLargeError,
    RateLimitExceededError,
    StoreFailureError,
    ValidationFailedError,
)
from backoffice.app.middleware.auth import AdminPrincipal, require_admin
from backoffice.app.middleware.rate_limit import get_client_identifier, get_rate_limiter
from backoffice.app.middleware.request_id import get_request_id
from backoffice.app.services.validation import (
    RuleSet,
    ValidationResult,
    is_valid_uuid,
    safe_json_parse,
    validate_request,
)

logger = get_logger(__name__)

T = TypeVar("T")

Quota = Literal["read", "write", "delete"]

_NOT_JSON = object()


@dataclass
class GateContext:
    """What a handler receives once the gate has let a request through."""
    principal: AdminPrincipal
    payload: Dict[str, Any] = field(default_factory=dict)
    validation: Optional[ValidationResult] = None
    store_timeout: Optional[float] = None

    @property
    def data(self) -> Dict[str, Any]:
        """Sanitized fields when rules were applied, the raw payload otherwise."""
        if self.validation is not None:
            return self.validation.sanitized
        return self.payload

    async def store(self, operation: Awaitable[T], failure_message: str) -> T:
        """Run a store operation under the application's store deadline."""
        return await execute_store(operation, failure_message, timeout=self.store_timeout)


def _get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


class RequestGate:
    """FastAPI dependency composing rate limiting, admin auth and validation.

    Args:
        quota: Named quota from settings ("read", "write" or "delete")
        max_requests: Explicit per-window quota; overrides ``quota``
        rules: Field rules applied to the JSON body
        parse_body: Require a JSON object body
        max_body_size: Body ceiling in bytes (defaults to settings)
        timeout_seconds: Deadline for auth and body read (defaults to settings)
    """

    def __init__(
        self,
        quota: Quota = "read",
        *,
        max_requests: Optional[int] = None,
        rules: Optional[RuleSet] = None,
        parse_body: bool = False,
        max_body_size: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        self.quota = quota
        self.max_requests = max_requests
        self.rules = rules
        self.parse_body = parse_body or rules is not None
        self.max_body_size = max_body_size
        self.timeout_seconds = timeout_seconds

    def _limit(self, app_settings: Settings) -> int:
        if self.max_requests is not None:
            return self.max_requests
        return {
            "read": app_settings.rate_limit_read_requests,
            "write": app_settings.rate_limit_write_requests,
            "delete": app_settings.rate_limit_delete_requests,
        }[self.quota]

    async def __call__(self, request: Request) -> GateContext:
        app_settings = _get_settings(request)

        identifier = get_client_identifier(request)
        limit = self._limit(app_settings)
        result = get_rate_limiter(request).check(
            identifier, limit, app_settings.rate_limit_window_seconds
        )
        if not result.allowed:
            logger.info(
                "Rate limit exceeded",
                extra=get_log_context(
                    request_id=get_request_id(request),
                    path=request.url.path,
                    method=request.method,
                    client_id=identifier,
                ),
            )
            raise RateLimitExceededError(
                limit=result.limit,
                retry_after=result.retry_after or int(app_settings.rate_limit_window_seconds),
                reset_time=result.reset_time,
            )

        timeout = self.timeout_seconds or app_settings.gate_timeout_seconds
        try:
            return await asyncio.wait_for(self._admit(request, app_settings), timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Request exceeded {timeout}s gate deadline",
                extra=get_log_context(
                    request_id=get_request_id(request),
                    path=request.url.path,
                    method=request.method,
                ),
            )
            raise GateTimeoutError()

    async def _admit(self, request: Request, app_settings: Settings) -> GateContext:
        principal = await require_admin(request)
        store_timeout = app_settings.store_timeout_seconds
        if not self.parse_body:
            return GateContext(principal=principal, store_timeout=store_timeout)

        ceiling = self.max_body_size or app_settings.max_body_size
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > ceiling:
            raise PayloadTooLargeError()

        body = await request.body()
        if len(body) > ceiling:
            raise PayloadTooLargeError()

        payload = safe_json_parse(body, _NOT_JSON)
        if not isinstance(payload, dict):
            raise BadRequestError("Invalid JSON body")

        if self.rules is None:
            return GateContext(principal=principal, payload=payload, store_timeout=store_timeout)

        validation = validate_request(payload, self.rules)
        if not validation.valid:
            self._log_rejection(request, principal, validation)
            raise ValidationFailedError(validation.errors, validation.malicious_fields)

        return GateContext(
            principal=principal,
            payload=payload,
            validation=validation,
            store_timeout=store_timeout,
        )

    @staticmethod
    def _log_rejection(
        request: Request,
        principal: AdminPrincipal,
        validation: ValidationResult,
    ) -> None:
        context = dict(
            request_id=get_request_id(request),
            path=request.url.path,
            method=request.method,
            admin_email=principal.email,
        )
        if validation.malicious_fields:
            logger.warning(
                f"Malicious input detected in: {', '.join(validation.malicious_fields)}",
                extra=get_log_context(validation_kind="malicious_input", **context),
            )
        else:
            logger.info(
                f"Validation failed: {validation.message}",
                extra=get_log_context(validation_kind="shape", **context),
            )


async def execute_store(
    operation: Awaitable[T],
    failure_message: str,
    timeout: Optional[float] = None,
) -> T:
    """Await a store operation, hiding failures behind ``failure_message``.

    Raises:
        StoreFailureError: 500 with ``failure_message`` on any store error
            or when the operation outlives ``timeout``
    """
    if timeout is None:
        timeout = default_settings.store_timeout_seconds
    try:
        return await asyncio.wait_for(operation, timeout)
    except BackofficeException:
        raise
    except Exception as exc:
        logger.exception(f"{failure_message}: {type(exc).__name__}")
        raise StoreFailureError(failure_message) from exc


def ensure_uuid(value: str, label: str) -> str:
    """Reject path ids that are not UUIDs before they reach the store."""
    if not is_valid_uuid(value):
        raise BadRequestError(f"Invalid {label} ID format")
    return value
