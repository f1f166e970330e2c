from .logger import configure_logging, notice_context, session_context, store_context

__all__ = ["configure_logging", "notice_context", "session_context", "store_context"]
