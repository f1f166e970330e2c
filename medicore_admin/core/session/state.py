"""
Session state.

A single phase enum replaces separate ``authenticated``/``resolving`` flags,
which are derived from it so the impossible combinations cannot be built.
"""

from dataclasses import dataclass
from enum import Enum

from medicore_admin.models import Principal


class SessionPhase(str, Enum):
    RESOLVING = "resolving"  # startup probe not finished yet
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Session:
    principal: Principal | None = None
    phase: SessionPhase = SessionPhase.RESOLVING

    def __post_init__(self) -> None:
        if (self.phase is SessionPhase.AUTHENTICATED) != (self.principal is not None):
            raise ValueError(f"Session phase {self.phase.value} inconsistent with principal {self.principal!r}")

    @property
    def authenticated(self) -> bool:
        return self.phase is SessionPhase.AUTHENTICATED

    @property
    def resolving(self) -> bool:
        return self.phase is SessionPhase.RESOLVING

    @classmethod
    def initial(cls) -> "Session":
        return cls()

    @classmethod
    def signed_in(cls, principal: Principal) -> "Session":
        return cls(principal=principal, phase=SessionPhase.AUTHENTICATED)

    @classmethod
    def anonymous(cls) -> "Session":
        return cls(principal=None, phase=SessionPhase.ANONYMOUS)
