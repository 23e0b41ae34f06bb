"""Port (interface) for the singleton settings row."""

from abc import ABC, abstractmethod
from typing import Any, Dict

from payouts.models import AppSettings


class SettingsStorePort(ABC):
    """Store holding the one global AppSettings row."""

    @abstractmethod
    def get(self) -> AppSettings:
        """Return the stored settings; unset fields are None."""
        ...

    @abstractmethod
    def save(self, patch: Dict[str, Any]) -> None:
        """Write only the camelCase keys present in ``patch``.

        Concurrent writers are not reconciled: the last write wins.
        """
        ...
