"""Link Manager Service - keeps a device configured and reachable."""

__version__ = "0.1.0"

from .controller import ReconciliationController
from .models import ControllerState, LinkState
from .service import LinkManagerService


def main():
    """Entry point for link manager service."""
    import sys
    from .service import run

    sys.exit(run())


def status_main():
    """Entry point for the interface status report."""
    import sys
    from .status import run_status

    sys.exit(run_status())


__all__ = [
    "ReconciliationController",
    "ControllerState",
    "LinkState",
    "LinkManagerService",
    "main",
    "status_main",
]
