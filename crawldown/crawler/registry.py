"""
Page registry shared between crawl tasks.

Holds one record per page identity while the crawl runs and hands a frozen
view to the link rewriting stage.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping


class RegistryFrozenError(RuntimeError):
    """Raised when a page is registered after the registry was frozen."""


class RegisterResult(Enum):
    """Outcome of a registration attempt."""

    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True)
class PageRecord:
    """A converted page waiting to be written."""

    normalized_url: str
    original_url: str
    filename: str
    markdown: str
    title: str = ""


@dataclass(frozen=True)
class RegistrySnapshot:
    """Read-only view of a frozen registry."""

    records: Mapping[str, PageRecord]
    url_to_filename: Mapping[str, str]

    def __len__(self) -> int:
        return len(self.records)


class PageRegistry:
    """
    Thread-safe mapping of normalized URL to page record.

    The first registration for a URL wins; later ones are discarded. The
    URL to filename index is updated in the same critical section.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[str, PageRecord] = {}
        self._url_to_filename: Dict[str, str] = {}
        self._frozen = False

    def register(self, normalized_url: str, record: PageRecord) -> RegisterResult:
        """
        Insert a record unless one already exists for the URL.

        Args:
            normalized_url: Registry key of the page
            record: Record to store

        Returns:
            RegisterResult.INSERTED or RegisterResult.ALREADY_PRESENT

        Raises:
            RegistryFrozenError: If called after freeze()
        """
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register {normalized_url}: registry is frozen"
                )
            if normalized_url in self._records:
                return RegisterResult.ALREADY_PRESENT
            self._records[normalized_url] = record
            self._url_to_filename[normalized_url] = record.filename
            return RegisterResult.INSERTED

    def snapshot(self) -> Dict[str, PageRecord]:
        """Get a point-in-time copy of all records."""
        with self._lock:
            return dict(self._records)

    def url_to_filename(self) -> Dict[str, str]:
        """Get a point-in-time copy of the URL to filename index."""
        with self._lock:
            return dict(self._url_to_filename)

    def freeze(self) -> RegistrySnapshot:
        """
        Stop accepting registrations and return a read-only view.

        Returns:
            RegistrySnapshot of the final records and index
        """
        with self._lock:
            self._frozen = True
            return RegistrySnapshot(
                records=MappingProxyType(dict(self._records)),
                url_to_filename=MappingProxyType(dict(self._url_to_filename)),
            )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, normalized_url: object) -> bool:
        with self._lock:
            return normalized_url in self._records


class PageCounter:
    """Thread-safe count of completed pages in a run."""

    def __init__(self, start: int = 0):
        self._lock = threading.Lock()
        self._value = start

    def increment(self) -> int:
        """Add one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value
