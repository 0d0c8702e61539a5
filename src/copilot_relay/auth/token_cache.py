"""
Persistent storage for the identity library's serialized token cache.

The cache blob is opaque: it is read and written whole and never parsed.
Writes go to a temporary file in the target directory which is then
atomically renamed over the target, so a concurrent reader sees either the
previous blob or the new one in full.
"""

import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from copilot_relay.auth.exceptions import TokenCacheError
from copilot_relay.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ITokenCacheStore(ABC):
    """
    Capability to load and save one serialized token cache blob.

    The identity provider receives a store at construction time and calls it
    before the library reads its cache and after the library may have changed it.
    """

    @abstractmethod
    def load(self) -> Optional[str]:
        """
        Load the persisted blob.

        Returns:
            The full blob, or None if nothing has been saved yet

        Raises:
            TokenCacheError: If the blob exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, blob: str) -> None:
        """
        Replace the persisted blob.

        Args:
            blob: Complete serialized cache

        Raises:
            TokenCacheError: If the blob cannot be written
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the persisted blob, forcing the next acquisition to start empty."""
        pass

    @contextmanager
    def lock(self) -> Iterator[None]:
        """
        Hold exclusive access for one load-then-maybe-save cycle.

        The default implementation does not lock.
        """
        yield


class FileTokenCacheStore(ITokenCacheStore):
    """Token cache persisted to a single file."""

    def __init__(self, location: str) -> None:
        self.location = location
        self._lock = threading.Lock()

    def load(self) -> Optional[str]:
        try:
            with open(self.location, "r", encoding="utf-8", newline="") as cache_file:
                blob = cache_file.read()
        except FileNotFoundError:
            logger.debug("No persisted token cache", location=self.location)
            return None
        except (OSError, UnicodeError) as e:
            raise TokenCacheError(
                "Failed to read token cache",
                location=self.location,
                original_error=e,
            )

        logger.info("Loading token from cache", location=self.location)
        return blob

    def save(self, blob: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.location))
        temp_path: Optional[str] = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=directory,
                prefix=f".{os.path.basename(self.location)}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as temp_file:
                temp_file.write(blob)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_path, self.location)
            temp_path = None
        except (OSError, UnicodeError) as e:
            raise TokenCacheError(
                "Failed to write token cache",
                location=self.location,
                original_error=e,
            )
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)

        logger.info("Caching token", location=self.location)

    def clear(self) -> None:
        try:
            os.remove(self.location)
        except FileNotFoundError:
            return
        except OSError as e:
            raise TokenCacheError(
                "Failed to remove token cache",
                location=self.location,
                original_error=e,
            )
        logger.info("Token cache cleared", location=self.location)

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._lock:
            yield

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(location={self.location!r})"
