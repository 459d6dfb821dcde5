from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .pathutil import folder_prefix, matches_name


DateTime = Tuple[int, int, int, int, int, int]


@dataclass
class ArchiveEntry:
    name: str
    date_time: Optional[DateTime] = None
    data: Optional[bytes] = None
    # Source member, read on first access
    source: Optional[zipfile.ZipFile] = None
    info: Optional[zipfile.ZipInfo] = None

    def read(self) -> bytes:
        if self.data is None:
            if self.source is None or self.info is None:
                raise ValueError(f"entry has no content: {self.name}")
            self.data = self.source.read(self.info)
        return self.data


class ArchiveView:
    """Mutable, ordered set of zip file entries keyed by slash-separated path.

    A view is owned by one pipeline call: it is opened (or created empty),
    narrowed with folder(), edited with add()/remove() and finally serialized
    with to_bytes(). Directory members of the source zip are not carried.
    """

    def __init__(self):
        self._entries: Dict[str, ArchiveEntry] = {}
        # Zip this view opened; folder() views borrow it
        self._source: Optional[zipfile.ZipFile] = None

    @classmethod
    def open_or_none(cls, data: bytes) -> Optional["ArchiveView"]:
        """Open data as a zip; None when it is not one."""
        try:
            zf = zipfile.ZipFile(io.BytesIO(bytes(data)))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError, OSError):
            return None
        view = cls()
        view._source = zf
        for info in zf.infolist():
            if info.is_dir():
                continue
            view._entries[info.filename] = ArchiveEntry(
                name=info.filename,
                date_time=info.date_time,
                source=zf,
                info=info,
            )
        return view

    def close(self) -> None:
        """Release the source zip. Members not read yet can no longer be read."""
        if self._source is not None:
            self._source.close()
            self._source = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(list(self._entries.values()))

    def names(self) -> List[str]:
        return list(self._entries)

    def read(self, name: str) -> bytes:
        try:
            entry = self._entries[name]
        except KeyError:
            raise KeyError(f"no such entry: {name}") from None
        return entry.read()

    def add(self, name: str, data: bytes, date_time: Optional[DateTime] = None) -> None:
        self._entries[name] = ArchiveEntry(name=name, date_time=date_time, data=bytes(data))

    def remove(self, name: str) -> None:
        self._entries.pop(name, None)

    def find(self, name: str) -> Optional[str]:
        """Path of name at the root or, failing that, in any folder."""
        if name in self._entries:
            return name
        for path in self._entries:
            if matches_name(path, name):
                return path
        return None

    def folder(self, folder: str) -> "ArchiveView":
        """New view of the entries under folder, with paths made relative."""
        prefix = folder_prefix(folder)
        sub = ArchiveView()
        for path, entry in self._entries.items():
            if not path.startswith(prefix) or path == prefix:
                continue
            rel = path[len(prefix):]
            sub._entries[rel] = ArchiveEntry(
                name=rel,
                date_time=entry.date_time,
                data=entry.data,
                source=entry.source,
                info=entry.info,
            )
        return sub

    def set_date_time(self, date_time: DateTime) -> None:
        for entry in self._entries.values():
            entry.date_time = date_time

    def to_bytes(self) -> bytes:
        from .rebuild import rebuild_zip

        return rebuild_zip(self)
