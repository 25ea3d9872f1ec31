"""
API Dependencies

FastAPI dependency injection for authentication, admin/cron guards and the
services the routes use.

Security: JWT tokens are verified cryptographically using Supabase JWKS
(ES256) with HS256 fallback via the JWT secret. Never decode without
verification.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import UUID

import jwt
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from viralforge.config.settings import get_settings
from viralforge.infrastructure.ai.content_service import ContentService, get_content_service
from viralforge.infrastructure.db.dependencies import SessionDep
from viralforge.infrastructure.exceptions import ForbiddenError, UnauthorizedError
from viralforge.infrastructure.payments.stripe_service import StripeService, get_stripe_service
from viralforge.infrastructure.supabase.rpc_service import SupabaseRPCService, get_rpc_service
from viralforge.services.activity_logger import ActivityLogger
from viralforge.services.daily_suggestions import DailySuggestionService
from viralforge.services.insights import InsightService
from viralforge.services.plan_resolver import PlanResolver
from viralforge.services.quota_gate import QuotaGate


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# PyJWKClient caches keys internally and refreshes them on rotation
_jwks_client: Optional[PyJWKClient] = None


@dataclass(frozen=True)
class AuthenticatedUser:
    id: UUID
    email: Optional[str] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    Verify the Supabase JWT and return the caller.

    Verification strategy (in order):
      1. JWKS (ES256), supports key rotation automatically.
      2. HS256 with ``SUPABASE_JWT_SECRET`` for legacy signing.

    Raises:
        UnauthorizedError: token missing, expired, or invalid.
    """
    if not credentials:
        raise UnauthorizedError("Missing authorization token")

    token = credentials.credentials
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(token, settings.supabase_jwt_secret, issuer)
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise UnauthorizedError("Invalid or unverifiable token")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid token: missing user ID")

    return AuthenticatedUser(id=user_id, email=payload.get("email"))


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]


def is_super_admin(email: Optional[str]) -> bool:
    """Case-insensitive membership in the SUPERADMIN_EMAILS allowlist."""
    if not email:
        return False
    return email.strip().lower() in get_settings().admin_emails


async def require_admin(user: CurrentUser) -> AuthenticatedUser:
    """401 without a session (via get_current_user), 403 for non-admins."""
    if not is_super_admin(user.email):
        logger.warning(f"Admin access denied for user {user.id}")
        raise ForbiddenError("Admin access required")
    return user


AdminUser = Annotated[AuthenticatedUser, Depends(require_admin)]


async def verify_cron_secret(authorization: Optional[str] = Header(default=None)) -> None:
    """
    Cron jobs authenticate with ``Authorization: Bearer <CRON_SECRET>``.

    Rejected when no secret is configured.
    """
    cron_secret = get_settings().cron_secret
    if not cron_secret or not authorization:
        raise UnauthorizedError()
    if not secrets.compare_digest(authorization.encode(), f"Bearer {cron_secret}".encode()):
        raise UnauthorizedError()


# =============================================================================
# Service providers
# =============================================================================

def get_plan_resolver() -> PlanResolver:
    return PlanResolver()


PlanResolverDep = Annotated[PlanResolver, Depends(get_plan_resolver)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
RPCServiceDep = Annotated[SupabaseRPCService, Depends(get_rpc_service)]
StripeServiceDep = Annotated[StripeService, Depends(get_stripe_service)]


def get_quota_gate(session: SessionDep, resolver: PlanResolverDep) -> QuotaGate:
    return QuotaGate(session, resolver)


def get_activity_logger(session: SessionDep) -> ActivityLogger:
    return ActivityLogger(session)


def get_daily_suggestion_service(
    session: SessionDep,
    content: ContentServiceDep,
    resolver: PlanResolverDep,
) -> DailySuggestionService:
    return DailySuggestionService(session, content, resolver)


def get_insight_service(
    session: SessionDep,
    content: ContentServiceDep,
    rpc: RPCServiceDep,
    resolver: PlanResolverDep,
) -> InsightService:
    return InsightService(session, content, rpc, resolver)


QuotaGateDep = Annotated[QuotaGate, Depends(get_quota_gate)]
ActivityLoggerDep = Annotated[ActivityLogger, Depends(get_activity_logger)]
DailySuggestionServiceDep = Annotated[DailySuggestionService, Depends(get_daily_suggestion_service)]
InsightServiceDep = Annotated[InsightService, Depends(get_insight_service)]


# Re-export DB dependencies so routers import from one place
from viralforge.infrastructure.db.dependencies import (  # noqa: E402, F401
    ABTestRepoDep,
    AnalysisRepoDep,
    CategoryRepoDep,
    ProfileRepoDep,
    UsageRepoDep,
    WebhookEventRepoDep,
)
