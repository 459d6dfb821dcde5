"""
sbunpack: recover Scratch projects from packaged HTML pages and zip files.

Packagers (TurboWarp Packager and its legacy version, the forkphorus
packager, HTMLifier) embed an sb, sb2 or sb3 project into a standalone page
or zip. Every historical version did it differently: nested zips, four
incompatible base85 variants, base64 data URIs or inline JSON asset maps.
unpackage() detects which scheme produced an artifact and inverts it:

    from sbunpack import unpackage
    project = unpackage(open("game.html", "rb").read())
    project.type   # "sb", "sb2" or "sb3"
    project.data   # the project file

The recovered contents are not validated or interpreted.
"""

__version__ = "0.1"

from .errors import (
    UnpackagerError,
    UnknownProjectTypeError,
    ZipMissingProjectError,
    NoProjectFoundError,
    BlobReadError,
    DataURINotBase64Error,
    DataURIDecodeError,
    Base85Error,
    HTMLPayloadError,
)
from .project import UnpackagedProject, identify_project_json_type, unpackage_binary_blob
from .unpack import unpackage, unpackage_file

__all__ = [
    "unpackage",
    "unpackage_file",
    "unpackage_binary_blob",
    "identify_project_json_type",
    "UnpackagedProject",
    "UnpackagerError",
    "UnknownProjectTypeError",
    "ZipMissingProjectError",
    "NoProjectFoundError",
    "BlobReadError",
    "DataURINotBase64Error",
    "DataURIDecodeError",
    "Base85Error",
    "HTMLPayloadError",
]
