"""Local filesystem blob storage served under a public URL prefix."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from ..config import StorageSettings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def stamped_filename(original: str | None, extension: str) -> str:
    """Return ``{base}-{UTC timestamp}{ext}`` with the base stripped of path parts."""
    name = PurePosixPath((original or "").replace("\\", "/")).name
    base = _UNSAFE_CHARS.sub("-", PurePosixPath(name).stem).strip(".-") or "upload"
    stamp = datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    return f"{base[:80]}-{stamp}{extension}"


@dataclass(slots=True)
class LocalBlobStorage:
    """Write blobs below ``settings.root`` and address them by public URL."""

    settings: StorageSettings

    @property
    def root(self) -> Path:
        return self.settings.root

    def save(self, scope: str, filename: str, data: bytes) -> str:
        directory = self._scope_dir(scope)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / PurePosixPath(filename).name
        target.write_bytes(data)
        url = self.url_for(target)
        logger.info(
            "storage.blob.saved",
            extra={"scope": scope, "blob_name": target.name, "size_bytes": len(data)},
        )
        return url

    def resolve(self, path: str) -> Path | None:
        """Map a public URL or root-relative path to a file inside the root."""
        raw = (path or "").strip()
        if not raw:
            return None
        prefix = self.settings.base_url.rstrip("/") + "/"
        if raw.startswith(prefix):
            raw = raw[len(prefix) :]
        root = self.root.resolve()
        candidate = (root / raw.lstrip("/")).resolve()
        if candidate != root and root not in candidate.parents:
            return None
        return candidate

    def exists(self, path: str) -> bool:
        candidate = self.resolve(path)
        return candidate is not None and candidate.is_file()

    def read(self, path: str) -> bytes:
        candidate = self.resolve(path)
        if candidate is None or not candidate.is_file():
            raise FileNotFoundError(path)
        return candidate.read_bytes()

    def delete_url(self, url: str) -> bool:
        candidate = self.resolve(url)
        if candidate is None or not candidate.is_file():
            return False
        candidate.unlink()
        logger.info("storage.blob.deleted", extra={"blob_path": str(candidate)})
        return True

    def iter_files(self, scope: str) -> Iterator[Path]:
        directory = self._scope_dir(scope)
        if not directory.exists():
            return
        yield from (path for path in directory.rglob("*") if path.is_file())

    def url_for(self, path: Path) -> str:
        relative = path.resolve().relative_to(self.root.resolve()).as_posix()
        return f"{self.settings.base_url}/{relative}"

    def _scope_dir(self, scope: str) -> Path:
        parts = [part for part in PurePosixPath(scope).parts if part not in {"", "/", ".", ".."}]
        return self.root.joinpath(*parts)


__all__ = ["LocalBlobStorage", "stamped_filename"]
