from __future__ import annotations

import io
import zipfile
from typing import Optional

from .archive import ArchiveView
from .constants import FIXED_ZIP_DATE_TIME, ZIP_CREATE_SYSTEM, ZIP_FILE_ATTR


def rebuild_zip(view: ArchiveView, *, compresslevel: Optional[int] = None) -> bytes:
    """
    Serialize a view into deflate-compressed zip bytes.

    Every entry is stamped with FIXED_ZIP_DATE_TIME first (the view is updated
    in place) and all other per-entry metadata is fixed, so two views with the
    same paths and contents in the same order always produce the same bytes,
    whatever timestamps or host they came from.
    """
    view.set_date_time(FIXED_ZIP_DATE_TIME)
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for entry in view:
            info = zipfile.ZipInfo(entry.name, date_time=entry.date_time)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.create_system = ZIP_CREATE_SYSTEM
            info.external_attr = ZIP_FILE_ATTR
            zf.writestr(info, entry.read(), compresslevel=compresslevel)
    return buf.getvalue()
