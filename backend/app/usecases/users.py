from typing import List, Optional

from ..domain.repositories import UserRepository
from ..models import User, UserRole


async def list_users(user_repo: UserRepository, *, role: Optional[UserRole] = None) -> List[User]:
    return await user_repo.list_users(role)
