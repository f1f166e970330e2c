from .controller import SessionController, SessionListener
from .state import Session, SessionPhase

__all__ = ["Session", "SessionPhase", "SessionController", "SessionListener"]
