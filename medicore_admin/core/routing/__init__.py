from .guard import PLACEHOLDER, GuardDecision, GuardState, RenderKind, RouteGuard
from .routes import NAVIGATION, ROUTES, ConsoleRouter, NavItem, Resolution, Route

__all__ = [
    "RouteGuard",
    "GuardState",
    "GuardDecision",
    "RenderKind",
    "PLACEHOLDER",
    "ConsoleRouter",
    "Route",
    "Resolution",
    "NavItem",
    "ROUTES",
    "NAVIGATION",
]
