"""
Base Example Site — Session Snapshot & Instructions
=====================================================

What:  Read-only view of the visitor's session plus explicit mutation
       instructions that handlers return.
Why:   Handlers never touch the cookie session directly; the dispatcher is
       the only writer. That keeps the Anonymous ⇄ Authenticated transitions
       in one place:

           Anonymous ──login/register──▶ Authenticated
           Authenticated ──logout/self-delete──▶ Anonymous

How:   The cookie itself is signed by Starlette's SessionMiddleware
       (itsdangerous); it stores a single key, USER_ID_KEY.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, MutableMapping, Optional

USER_ID_KEY = "user_id"


@dataclass(frozen=True)
class SessionSnapshot:
    user_id: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return bool(self.user_id)

    @classmethod
    def from_mapping(cls, session: MutableMapping[str, Any]) -> "SessionSnapshot":
        user_id = session.get(USER_ID_KEY)
        return cls(user_id=str(user_id) if user_id else None)


class SessionAction(str, Enum):
    SET_USER = "set_user"
    CLEAR = "clear"


@dataclass(frozen=True)
class SessionUpdate:
    action: SessionAction
    user_id: Optional[str] = None

    @classmethod
    def set_user(cls, user_id: str) -> "SessionUpdate":
        return cls(action=SessionAction.SET_USER, user_id=user_id)

    @classmethod
    def clear(cls) -> "SessionUpdate":
        return cls(action=SessionAction.CLEAR)

    def apply(self, session: MutableMapping[str, Any]) -> None:
        if self.action is SessionAction.SET_USER:
            session[USER_ID_KEY] = self.user_id
        else:
            session.pop(USER_ID_KEY, None)
