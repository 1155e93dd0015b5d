"""Link change notifications from the device's sysfs carrier file."""

import errno
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generator

from inotify_simple import INotify, flags

from .errors import DeviceNotFound
from .inspector import SYSFS_NET

logger = logging.getLogger(__name__)

WATCH_FLAGS = flags.MODIFY | flags.CREATE


@dataclass
class LinkEvent:
    """Signal that the link may have changed. Carries no state itself."""
    initial: bool = False
    mask: int = 0
    timestamp: float = field(default_factory=time.time)


class LinkEventSource:
    """Produces link events for one device.

    The first event is synthetic so the current state is evaluated at
    startup; later events follow inotify activity on the carrier file.
    """

    def __init__(
        self,
        device: str,
        sysfs_root: str = SYSFS_NET,
        inotify_factory: Callable[[], INotify] = INotify,
    ):
        self.device = device
        self.watch_path = Path(sysfs_root) / device / "carrier"
        self._inotify_factory = inotify_factory

    def subscribe(self) -> Generator[LinkEvent, None, None]:
        """Establish the watch and return the event sequence.

        Raises:
            DeviceNotFound: If the carrier file cannot be watched.
        """
        inotify = self._inotify_factory()
        try:
            inotify.add_watch(str(self.watch_path), WATCH_FLAGS)
        except OSError as e:
            inotify.close()
            if e.errno == errno.ENOENT:
                raise DeviceNotFound(self.device, f"{self.watch_path} does not exist")
            raise DeviceNotFound(self.device, f"cannot watch {self.watch_path}: {e}")

        logger.info(f"Listening for link changes on {self.watch_path}")
        return self._events(inotify)

    def _events(self, inotify: INotify) -> Generator[LinkEvent, None, None]:
        try:
            yield LinkEvent(initial=True)
            while True:
                try:
                    batch = inotify.read()
                except OSError as e:
                    logger.error(f"Error reading inotify events: {e}")
                    return

                if not batch:
                    continue
                mask = 0
                for event in batch:
                    mask |= event.mask
                if mask & flags.IGNORED:
                    raise DeviceNotFound(self.device, f"{self.watch_path} disappeared")

                logger.info(f"Link state change detected on {self.device}")
                yield LinkEvent(mask=mask)
        finally:
            inotify.close()
