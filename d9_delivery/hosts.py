"""
Host adapters used by the distribution paths

* LocalSaveHost: where an exported PDF lands (a directory, or memory for
  HTTP downloads)
* EphemeralShareRegistry: session-scoped share handles
* Clipboard: system clipboard (pyperclip) or an in-memory stand-in
"""

import asyncio
import logging
import os
import shutil
import tempfile
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pyperclip

from core.exceptions import HandoffFailure
from d9_delivery.messages import SHARE_CAVEAT

logger = logging.getLogger(__name__)


class LocalSaveHost(ABC):
    """Destination for locally exported documents"""

    @abstractmethod
    async def save(self, filename: str, data: bytes) -> str:
        """Store ``data`` under ``filename`` and return where it went"""


class DirectorySaveHost(LocalSaveHost):
    """Writes exported documents into a directory"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    async def save(self, filename: str, data: bytes) -> str:
        try:
            return await asyncio.to_thread(self._write, filename, data)
        except OSError as e:
            logger.error(f"Failed to write {filename} to {self.directory}: {e}")
            raise HandoffFailure(f"Could not save {filename}: {e}", target="file") from e

    def _write(self, filename: str, data: bytes) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / filename

        # Write to a sibling temp file first so a failed write leaves no partial PDF
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".opr-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, target)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info(f"Saved {target} ({len(data)} bytes)")
        return str(target)


class InMemorySaveHost(LocalSaveHost):
    """Keeps exported documents in memory, keyed by filename"""

    def __init__(self):
        self.files: Dict[str, bytes] = {}

    async def save(self, filename: str, data: bytes) -> str:
        self.files[filename] = data
        return filename


@dataclass
class ShareHandle:
    """A session-only link to a published document"""

    url: str
    path: str
    caveat: str = SHARE_CAVEAT


class EphemeralShareRegistry:
    """
    Publishes documents as ``file://`` links that live as long as the session

    Handles are files in a private temp directory; ``close()`` removes the
    directory and revokes every handle issued.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir
        self._session_dir: Optional[Path] = None
        self._handles: List[ShareHandle] = []

    @property
    def handles(self) -> List[ShareHandle]:
        return list(self._handles)

    async def publish(self, filename: str, data: bytes) -> ShareHandle:
        try:
            handle = await asyncio.to_thread(self._write, filename, data)
        except OSError as e:
            logger.error(f"Failed to publish share link for {filename}: {e}")
            raise HandoffFailure(f"Could not create share link: {e}", target="share") from e

        self._handles.append(handle)
        return handle

    def _write(self, filename: str, data: bytes) -> ShareHandle:
        if self._session_dir is None:
            if self.base_dir:
                Path(self.base_dir).mkdir(parents=True, exist_ok=True)
            self._session_dir = Path(tempfile.mkdtemp(prefix="opr-share-", dir=self.base_dir))

        handle_dir = self._session_dir / uuid.uuid4().hex[:12]
        handle_dir.mkdir()
        path = handle_dir / filename
        path.write_bytes(data)
        return ShareHandle(url=path.resolve().as_uri(), path=str(path))

    def revoke(self, handle: ShareHandle) -> None:
        if handle in self._handles:
            self._handles.remove(handle)
        shutil.rmtree(Path(handle.path).parent, ignore_errors=True)

    def close(self) -> None:
        """Revoke all handles issued in this session"""
        if self._session_dir is not None:
            shutil.rmtree(self._session_dir, ignore_errors=True)
            logger.info(f"Revoked {len(self._handles)} share link(s)")
        self._session_dir = None
        self._handles.clear()


class Clipboard(ABC):
    @abstractmethod
    async def write_text(self, text: str) -> None:
        """Place ``text`` on the clipboard"""


class PyperclipClipboard(Clipboard):
    """System clipboard"""

    async def write_text(self, text: str) -> None:
        try:
            await asyncio.to_thread(pyperclip.copy, text)
        except pyperclip.PyperclipException as e:
            logger.error(f"Clipboard write failed: {e}")
            raise HandoffFailure(f"Clipboard unavailable: {e}", target="clipboard") from e


class MemoryClipboard(Clipboard):
    """Clipboard kept in process, for servers and tests"""

    def __init__(self):
        self.text: Optional[str] = None

    async def write_text(self, text: str) -> None:
        self.text = text
