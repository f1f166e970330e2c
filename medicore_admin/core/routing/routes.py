"""
Console route table.

Maps the console's paths to view names and applies the guard to the
protected ones. The login page behaves the other way round: it shows the
placeholder while the session resolves and sends an authenticated admin home.
"""

from dataclasses import dataclass

from .guard import PLACEHOLDER, GuardDecision, GuardState, RenderKind, RouteGuard


@dataclass(frozen=True)
class Route:
    path: str
    view: str
    protected: bool = True


@dataclass(frozen=True)
class NavItem:
    label: str
    path: str


ROUTES: tuple[Route, ...] = (
    Route("/login", "login", protected=False),
    Route("/", "dashboard"),
    Route("/doctor/addnew", "add_doctor"),
    Route("/admin/addnew", "add_admin"),
    Route("/doctors", "doctors"),
    Route("/messages", "messages"),
)

NAVIGATION: tuple[NavItem, ...] = (
    NavItem("Home", "/"),
    NavItem("Doctors", "/doctors"),
    NavItem("Add Admin", "/admin/addnew"),
    NavItem("Add Doctor", "/doctor/addnew"),
    NavItem("Messages", "/messages"),
)


@dataclass(frozen=True)
class Resolution:
    route: Route
    decision: GuardDecision

    @property
    def view(self) -> str | None:
        return self.route.view if self.decision.allowed else None


class ConsoleRouter:
    def __init__(self, guard: RouteGuard, home_path: str = "/", routes: tuple[Route, ...] = ROUTES) -> None:
        self.guard = guard
        self.home_path = home_path
        self._routes = {route.path: route for route in routes}

    def match(self, path: str) -> Route | None:
        normalized = path.split("?", 1)[0].split("#", 1)[0]
        if normalized != "/":
            normalized = normalized.rstrip("/")
        return self._routes.get(normalized)

    def resolve(self, path: str) -> Resolution | None:
        """Resolve ``path``; None for unknown paths."""
        route = self.match(path)
        if route is None:
            return None
        if route.protected:
            return Resolution(route, self.guard.evaluate(path))
        return Resolution(route, self._public_decision(path))

    def _public_decision(self, path: str) -> GuardDecision:
        state = self.guard.state
        if state is GuardState.PENDING:
            return GuardDecision(state, RenderKind.PLACEHOLDER, path, placeholder=PLACEHOLDER)
        if state is GuardState.AUTHORIZED:
            return GuardDecision(state, RenderKind.REDIRECT, path, redirect_to=self.home_path)
        return GuardDecision(state, RenderKind.VIEW, path)

    def navigation(self) -> tuple[NavItem, ...]:
        return NAVIGATION if self.guard.navigation_visible else ()
