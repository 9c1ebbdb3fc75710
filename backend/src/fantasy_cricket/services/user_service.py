"""User registration."""

import logging
import threading

from fantasy_cricket.models.league import User
from fantasy_cricket.models.squad import Squad
from fantasy_cricket.repositories.base import FantasyRepository
from fantasy_cricket.services.errors import SquadValidationError, ValidationErrorCode
from fantasy_cricket.services.squad_service import SquadService

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 32


class UserService:
    def __init__(self, repository: FantasyRepository, squad_service: SquadService):
        self.repository = repository
        self.squad_service = squad_service
        self._register_lock = threading.Lock()

    def register(self, username: str) -> tuple[User, Squad]:
        """Create a user and their empty squad.

        Raises:
            SquadValidationError: InvalidName for a blank or overlong name,
                UsernameTaken when the name exists in any letter case
        """
        username = (username or "").strip()
        if not username or len(username) > MAX_USERNAME_LENGTH:
            raise SquadValidationError(
                ValidationErrorCode.INVALID_NAME,
                f"Username must be 1-{MAX_USERNAME_LENGTH} characters",
            )
        with self._register_lock:
            if self.repository.get_user_by_username(username) is not None:
                raise SquadValidationError(ValidationErrorCode.USERNAME_TAKEN, f"Username {username} is taken")

            user = User(id=self.repository.next_id("users"), username=username)
            self.repository.put_user(user)
        squad = self.squad_service.create_squad(user.id, f"{username}'s Team")
        logger.info(f"Registered user {user.id} ({username})")
        return user, squad

    def get_user(self, user_id: int) -> User:
        user = self.repository.get_user(user_id)
        if user is None:
            raise SquadValidationError(ValidationErrorCode.USER_NOT_FOUND, f"User not found: {user_id}")
        return user
