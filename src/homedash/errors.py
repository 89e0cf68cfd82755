"""Exception types raised by homedash adapters."""


class HomedashError(Exception):
    """Base class for all homedash errors."""


class ConfigError(HomedashError):
    """Configuration file or environment value is invalid."""


class StoreError(HomedashError):
    """A remote state store read, write or subscription failed."""


class ClassifierError(HomedashError):
    """The intent classifier could not be reached or returned garbage."""


class CaptureError(HomedashError):
    """Voice capture failed to start or record."""


class CaptureBusyError(CaptureError):
    """A capture session is already listening."""
