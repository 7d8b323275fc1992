from dataclasses import dataclass


@dataclass(frozen=True)
class UserSession:
    """
    The signed-in user a request acts for.

    Built once per request and handed to every service that touches
    user-scoped rows. Services never look the user up on their own.
    """

    user_id: str

    def scope_path(self, *parts: str) -> str:
        """Document-style path used to name change-feed scopes."""
        return "/".join(("users", self.user_id, *parts))
