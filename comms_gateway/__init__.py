"""Comms Gateway: authenticated HTTP front door for Azure email and push notifications.

Public API re-exported here for convenience::

    from comms_gateway import create_app, Settings
"""

__version__ = "0.1.0"

from .app import create_app  # noqa: E402
from .client import GatewayClient  # noqa: E402
from .config import Settings  # noqa: E402
from .logging import setup_logging  # noqa: E402

__all__ = [
    "GatewayClient",
    "Settings",
    "__version__",
    "create_app",
    "setup_logging",
]
