from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from tixit.core.errors import RateLimited
from tixit.core.rate_limit import Decision
from tixit.db.session import get_db
from tixit.models.user import User
from tixit.services import auth_service

bearer = HTTPBearer(auto_error=False)


def _token(creds: HTTPAuthorizationCredentials | None) -> str | None:
    return creds.credentials if creds else None


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    return auth_service.require_user(db, _token(creds))


def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User | None:
    return auth_service.resolve_user(db, _token(creds))


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request, bucket: str) -> Decision:
    """Count the request against ``bucket`` for the caller's address; raises RateLimited when full."""
    decision = request.app.state.rate_limiter.hit(bucket, client_address(request))
    if not decision.allowed:
        raise RateLimited(decision.retry_after)
    return decision


def rate_limit(bucket: str):
    """Dependency form of ``enforce_rate_limit`` that also reports the remaining budget."""
    def _check(request: Request, response: Response) -> None:
        decision = enforce_rate_limit(request, bucket)
        limit = request.app.state.rate_limiter.limit_for(bucket)
        response.headers["RateLimit-Limit"] = str(limit.requests)
        response.headers["RateLimit-Remaining"] = str(decision.remaining)
    return _check
