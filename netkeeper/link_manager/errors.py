"""Errors raised by the link manager components."""


class NetkeeperError(Exception):
    """Base class for link manager errors."""

    pass


class DeviceNotFound(NetkeeperError):
    """Raised when the managed network device does not exist."""

    def __init__(self, device: str, detail: str = ""):
        self.device = device
        message = f"Network device '{device}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ConfigWriteFailed(NetkeeperError):
    """Raised when a persisted configuration record cannot be created."""

    pass


class ConfigRemoveFailed(NetkeeperError):
    """Raised when a persisted configuration record cannot be deleted."""

    pass


class StaticConfigError(NetkeeperError):
    """Raised when the static override file is present but unusable."""

    pass


class ReconfigurationExhausted(NetkeeperError):
    """Raised when connectivity is still missing after escalation."""

    def __init__(self, device: str, target: str):
        self.device = device
        self.target = target
        super().__init__(
            f"{target} still unreachable on {device} after reconfiguration"
        )
