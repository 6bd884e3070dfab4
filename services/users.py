import logging
from typing import Optional

from sqlalchemy.orm import Session

import db_models
from core.security import hash_password

logger = logging.getLogger(__name__)


def create_or_promote_admin(
    db_session: Session,
    username: str,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> db_models.User:
    """
    Give ROLE_ADMIN to username, creating the account if it doesn't exist.
    Creating an account requires both email and password.
    """
    user = (
        db_session.query(db_models.User)
        .filter(db_models.User.username == username)
        .first()
    )

    if user:
        user.is_admin = True  # type: ignore
        logger.info(f"Promoted user_id={user.id} to admin")
    else:
        if not email or not password:
            raise ValueError(
                f"User '{username}' does not exist: email and password are required"
            )
        user = db_models.User(
            username=username,
            email=email,
            hashed_password=hash_password(password),
            is_admin=True,
        )
        db_session.add(user)
        logger.info(f"Created admin account username='{username}'")

    db_session.commit()
    db_session.refresh(user)
    return user
