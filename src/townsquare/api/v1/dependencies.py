"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, NoReturn

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from townsquare.core.security import decode_subject
from townsquare.db.session import get_db
from townsquare.models import User
from townsquare.services.errors import EngineError
from townsquare.services.toxicity import ToxicityClassifier, get_toxicity_classifier

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _decode_user_id(subject: str) -> int:
    """Decode the user id carried in a token subject.

    Raises:
        HTTPException: If the subject is not an integer id
    """
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    try:
        subject = decode_subject(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.get(User, _decode_user_id(subject))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_classifier_dep() -> ToxicityClassifier:
    """Return the toxicity classifier used by the case queue."""
    return get_toxicity_classifier()


def raise_http(err: EngineError) -> NoReturn:
    """Translate a service-layer error into an HTTP error response."""
    raise HTTPException(status_code=err.status_code, detail=str(err)) from err


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
ClassifierDep = Annotated[ToxicityClassifier, Depends(get_classifier_dep)]
