from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for every failure surfaced by a conversion."""


class InvalidInputError(ExportError):
    pass


class NotFoundError(ExportError):
    pass


class IOFailureError(ExportError):
    pass


class ImageDecodeError(IOFailureError):
    pass


class SerializationError(ExportError):
    pass
