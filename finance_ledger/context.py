"""
Per-call user context.

Every service operation receives the caller's context explicitly.
There is no ambient "current user": the API layer builds a
UserContext from the request and hands it down.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserContext:
    user_id: str

    def __post_init__(self):
        if not self.user_id or not self.user_id.strip():
            raise ValueError("user_id must not be empty")
