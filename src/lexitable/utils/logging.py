import logging
import os

_HANDLER_ATTACHED = False


def _configure_root() -> None:
    global _HANDLER_ATTACHED
    if _HANDLER_ATTACHED:
        return
    root = logging.getLogger("lexitable")
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root.addHandler(handler)
    level_name = os.environ.get("LEXITABLE_LOG_LEVEL", "WARNING").upper()
    root.setLevel(getattr(logging, level_name, logging.WARNING))
    _HANDLER_ATTACHED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the shared ``lexitable`` hierarchy."""
    _configure_root()
    return logging.getLogger(name)
