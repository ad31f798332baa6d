# survey_intel/auth/context.py
"""Per-request identity.

Handlers receive a `RequestContext` through `Depends(get_request_context)`
instead of reading any ambient session state. Owner-only routes call
`require_owner` once the survey has been loaded.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from survey_intel.auth.jwt import decode_access_token
from survey_intel.db.session import get_db
from survey_intel.models.survey import Survey
from survey_intel.models.user import User
from survey_intel.services import storage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    user: Optional[User] = None

    @property
    def user_id(self) -> Optional[int]:
        return self.user.id if self.user is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_request_context(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> RequestContext:
    # A bad or expired token degrades to an anonymous context; routes that
    # need a user reject it through require_user.
    if not token:
        return RequestContext()
    username = decode_access_token(token)
    if username is None:
        return RequestContext()
    return RequestContext(user=storage.get_user_by_username(db, username))


def require_user(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not ctx.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ctx


def require_owner(ctx: RequestContext, survey: Survey, action: str = "access") -> None:
    if ctx.user_id != survey.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You don't have permission to {action} this survey",
        )
