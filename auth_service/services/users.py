"""User directory: create and look up users. Owns the email uniqueness rule."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from auth_service.core.errors import EmailConflictError, InternalError
from auth_service.core.security import hash_password
from auth_service.models.user import Role, User
from auth_service.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)


class UserDirectory:
    def __init__(self, session: Session, bcrypt_rounds: int) -> None:
        self.session = session
        self.bcrypt_rounds = bcrypt_rounds

    def create(self, data: RegisterRequest, role: Role = Role.CUSTOMER) -> User:
        """
        Hash the password and persist a new user.

        Raises EmailConflictError if the email is taken, including when a concurrent
        registration wins the race and the unique index rejects this insert.
        """
        if self.find_by_email(data.email) is not None:
            raise EmailConflictError()

        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password_hash=hash_password(data.password, self.bcrypt_rounds),
            role=role.value,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise EmailConflictError() from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise InternalError("Failed to store the user in the database", cause=e) from e
        self.session.refresh(user)
        logger.info("User created", extra={"user_id": user.id, "role": user.role})
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.query(User).filter(User.id == user_id).first()
