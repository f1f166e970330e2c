"""
Route Guard

Gates every protected view on the session state:

    PENDING       session still resolving -> neutral placeholder, no redirect
    AUTHORIZED    authenticated           -> render the requested view
    UNAUTHORIZED  anonymous               -> redirect to the login entry point

The requested location is dropped on redirect; after login the console lands
on its home route, not on the page originally asked for.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from medicore_admin.core.session import Session, SessionController

logger = logging.getLogger(__name__)

PLACEHOLDER = "MediCore..."


class GuardState(str, Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


class RenderKind(str, Enum):
    PLACEHOLDER = "placeholder"
    VIEW = "view"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    render: RenderKind
    requested_path: str
    redirect_to: str | None = None
    placeholder: str | None = None

    @property
    def allowed(self) -> bool:
        return self.render is RenderKind.VIEW


class RouteGuard:
    """
    Derives the guard state from the session controller.

    Once the session has resolved the guard never reports PENDING again,
    even if it is handed a session that claims to be resolving.
    """

    def __init__(self, controller: SessionController, login_path: str = "/login") -> None:
        self._controller = controller
        self.login_path = login_path
        self._resolved = False

    @staticmethod
    def state_for(session: Session) -> GuardState:
        if session.resolving:
            return GuardState.PENDING
        if session.authenticated:
            return GuardState.AUTHORIZED
        return GuardState.UNAUTHORIZED

    @property
    def state(self) -> GuardState:
        session = self._controller.session
        state = self.state_for(session)
        if state is GuardState.PENDING and self._resolved:
            # Unreachable through SessionController; kept monotonic regardless
            logger.warning("Session reported resolving after resolution; treating as unauthorized")
            return GuardState.UNAUTHORIZED
        if state is not GuardState.PENDING:
            self._resolved = True
        return state

    def evaluate(self, requested_path: str) -> GuardDecision:
        """Decide how a protected view at ``requested_path`` should render."""
        state = self.state
        if state is GuardState.PENDING:
            return GuardDecision(state, RenderKind.PLACEHOLDER, requested_path, placeholder=PLACEHOLDER)
        if state is GuardState.UNAUTHORIZED:
            logger.debug(f"Redirecting {requested_path} to {self.login_path}")
            return GuardDecision(state, RenderKind.REDIRECT, requested_path, redirect_to=self.login_path)
        return GuardDecision(state, RenderKind.VIEW, requested_path)

    @property
    def navigation_visible(self) -> bool:
        """The navigation bar is shown only for a resolved, authenticated session."""
        return self.state is GuardState.AUTHORIZED
