"""
Route Dependencies

Annotated aliases used in router signatures:

- DbSession: the request's SQLAlchemy session
- Pagination: ?page=&per_page= of list endpoints
- CurrentAccount: account behind the Bearer access token
- AdminAccount: same, restricted to administrators
- Ratings: RatingService running its transactions on the request's session
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.database import get_db
from catalog.models import Account
from catalog.services.rating_coordinator import RatingTransactionCoordinator
from catalog.services.rating_service import RatingService
from catalog.services.security import read_access_token

settings = get_settings()

DbSession = Annotated[Session, Depends(get_db)]


class PaginationParams:
    """page is 1-indexed; skip is the matching row offset."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
        per_page: int = Query(default=10, ge=1, le=100, description="Books per page"),
    ) -> None:
        self.page = page
        self.per_page = per_page

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.per_page


Pagination = Annotated[PaginationParams, Depends()]


# The account service issues the tokens; tokenUrl only drives the
# Authorize button of the interactive docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/auth/login")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_account(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Account:
    """
    Load the account named by the access token's ``sub`` claim.

    Raises:
        HTTPException: 401 for a missing, invalid or expired token, or an
            unknown account; 403 for a deactivated account
    """
    claims = read_access_token(token)
    if claims is None:
        raise _unauthorized()

    try:
        account_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized() from None

    account = db.get(Account, account_id)
    if account is None:
        raise _unauthorized()
    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    return account


def get_admin_account(current_account: Account = Depends(get_current_account)) -> Account:
    if not current_account.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return current_account


CurrentAccount = Annotated[Account, Depends(get_current_account)]
AdminAccount = Annotated[Account, Depends(get_admin_account)]


def get_rating_service(db: Session = Depends(get_db)) -> RatingService:
    return RatingService(RatingTransactionCoordinator(db))


Ratings = Annotated[RatingService, Depends(get_rating_service)]
