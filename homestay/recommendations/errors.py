from __future__ import annotations


class NotFoundError(LookupError):
    """A requested record does not exist in the store."""


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class PropertyNotFoundError(NotFoundError):
    def __init__(self, property_id: int) -> None:
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id
