"""
Session Controller

Owns the console's authentication state. The state is bootstrapped once per
process from a session probe (credentials travel as cookies on the API
client) and afterwards only changes through ``login``/``logout``.

Transitions:
    RESOLVING --probe ok--> AUTHENTICATED
    RESOLVING --probe failed--> ANONYMOUS
    any --login(principal)--> AUTHENTICATED
    any --logout()--> ANONYMOUS
RESOLVING is never re-entered.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from medicore_admin.core.events.subscription import ListenerRegistry, Subscription
from medicore_admin.core.shared.logger import session_context
from medicore_admin.models import Principal

from .state import Session

if TYPE_CHECKING:
    from medicore_admin.clients.medicore_api_client import MediCoreAPIClient

logger = logging.getLogger(__name__)

SessionListener = Callable[[Session], Any]


class SessionController:
    """
    Authentication state machine shared by every view.

    Example:
        ```python
        controller = SessionController(api_client)
        await controller.bootstrap()
        if controller.session.authenticated:
            ...
        ```
    """

    def __init__(self, api_client: MediCoreAPIClient) -> None:
        self._api = api_client
        self._session = Session.initial()
        self._listeners: ListenerRegistry[Session] = ListenerRegistry("Session")
        self._probe_task: asyncio.Task[Session] | None = None
        # Bumped by every explicit transition; a probe that started on an
        # older generation must not overwrite the newer state.
        self._generation = 0

    @property
    def session(self) -> Session:
        return self._session

    @property
    def principal(self) -> Principal | None:
        return self._session.principal

    # ------------------------------------------------------------------ #
    #  Bootstrap                                                          #
    # ------------------------------------------------------------------ #
    async def bootstrap(self) -> Session:
        """
        Resolve the startup session from the server.

        Any probe failure (network error, 401, malformed payload) resolves to
        anonymous without surfacing an error. Calling again while the probe
        runs awaits the same probe; calling after resolution is a no-op.

        Returns:
            The session after resolution
        """
        if not self._session.resolving:
            return self._session

        if self._probe_task is None:
            self._probe_task = asyncio.ensure_future(self._probe())
        return await asyncio.shield(self._probe_task)

    async def _probe(self) -> Session:
        generation = self._generation
        principal: Principal | None = None
        try:
            principal = await self._api.get_current_admin()
        except Exception as e:
            # Anonymous visitors are expected; not an error for the user
            logger.debug(f"Session probe failed, continuing as anonymous: {e}")

        if generation != self._generation or not self._session.resolving:
            logger.debug("Session probe result discarded: an explicit login/logout happened meanwhile")
            return self._session

        if principal is not None:
            logger.info(f"Session restored for {principal.email or principal.id}")
            self._transition(Session.signed_in(principal))
        else:
            self._transition(Session.anonymous())
        return self._session

    # ------------------------------------------------------------------ #
    #  Explicit transitions                                               #
    # ------------------------------------------------------------------ #
    def login(self, principal: Principal) -> Session:
        """
        Mark the session as authenticated.

        The caller has already completed the remote login exchange; this only
        records its outcome.
        """
        if principal is None:
            raise ValueError("login() requires a principal")
        self._generation += 1
        logger.info(f"Admin logged in: {principal.email or principal.id}")
        self._transition(Session.signed_in(principal))
        return self._session

    async def logout(self) -> Session:
        """
        End the session.

        The server is told best-effort; local state becomes anonymous whether
        or not that call succeeds.
        """
        self._generation += 1
        try:
            await self._api.logout()
        except Exception as e:
            logger.error(f"Logout failed: {e}")
        finally:
            self._transition(Session.anonymous())
        return self._session

    # ------------------------------------------------------------------ #
    #  Observers                                                          #
    # ------------------------------------------------------------------ #
    def subscribe(self, listener: SessionListener) -> Subscription[Session]:
        """Listeners receive the new Session synchronously after each change."""
        return self._listeners.add(listener)

    def unsubscribe(self, subscription: Subscription[Session]) -> bool:
        return self._listeners.remove(subscription)

    def _transition(self, new_session: Session) -> None:
        old_session = self._session
        if new_session == old_session:
            return
        self._session = new_session
        logger.debug(
            f"Session {old_session.phase.value} -> {new_session.phase.value}",
            extra=session_context(new_session),
        )
        self._listeners.deliver(new_session)
