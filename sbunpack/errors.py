class UnpackagerError(Exception):
    """Base class for sbunpack errors."""


# Project identification
class UnknownProjectTypeError(UnpackagerError):
    pass


class ZipMissingProjectError(UnpackagerError):
    pass


class NoProjectFoundError(UnpackagerError):
    pass


# Input boundary
class BlobReadError(UnpackagerError):
    pass


# Codecs
class DataURINotBase64Error(UnpackagerError):
    pass


class DataURIDecodeError(DataURINotBase64Error):
    pass


class Base85Error(UnpackagerError):
    pass


class Base85HeaderError(Base85Error):
    pass


class Base85LengthError(Base85Error):
    pass


# HTML payloads
class HTMLPayloadError(UnpackagerError):
    pass
