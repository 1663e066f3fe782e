import logging
import sys

from storefront.config import settings

_ROOT = "storefront"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        root.addHandler(h)
        root.setLevel(settings.LOG_LEVEL.upper())
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the `storefront` hierarchy, configuring it once."""
    _configure_root()
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")
