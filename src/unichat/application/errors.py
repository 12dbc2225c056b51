"""Failures raised by store and collection adapters."""


class SyncError(Exception):
    """Base class for local and remote storage failures."""


class LocalStorageFailure(SyncError):
    """The on-device store could not be read or written."""


class RemoteFetchFailure(SyncError):
    """A read from the remote collection failed (network, permission, ...)."""


class RemoteWriteFailure(SyncError):
    """A write to the remote collection failed."""
