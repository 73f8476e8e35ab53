"""
Error codes and exception types.

Native failures keep their errno so callers can use the usual
``os.strerror`` lookup. Codes above ``START_ERROR`` belong to hostfacts.
"""

import errno
import os

START_ERROR = 20000
ENOTIMPL = START_ERROR + 1
OS_START_ERROR = START_ERROR * 2

_ERROR_STRINGS = {
    ENOTIMPL: "This function has not been implemented on this platform",
}


class HostFactsError(OSError):
    """Base class for errors raised by hostfacts."""


class NotImplementedByPlatform(HostFactsError):
    """The running platform has no facility for the requested fact."""

    def __init__(self, what: str = ""):
        message = strerror(ENOTIMPL)
        if what:
            message = f"{what}: {message}"
        super().__init__(ENOTIMPL, message)


class OutOfMemoryError(HostFactsError):
    """A collection or buffer could not be (re)allocated."""

    def __init__(self, what: str = ""):
        super().__init__(errno.ENOMEM, f"Out of memory growing {what}".strip())


class BufferTooSmall(HostFactsError):
    """
    The interface-list query did not fit in the supplied buffer.

    ``length`` is the byte length the backend reported for the attempt.
    """

    def __init__(self, length: int):
        super().__init__(errno.EINVAL, os.strerror(errno.EINVAL))
        self.length = length


def strerror(code: int) -> str:
    """Get the message for a native errno or a hostfacts error code."""
    if code > OS_START_ERROR:
        return "Unknown OS Error"
    if code > START_ERROR:
        return _ERROR_STRINGS.get(code, "Error string not specified yet")
    return os.strerror(code)
