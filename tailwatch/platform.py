"""
Cross-platform file access for Tailwatch.

The monitored log belongs to another process, so it is always opened in a
mode that lets that process keep writing, truncating, renaming and deleting
it while we read.
"""

import os
from typing import BinaryIO

from tailwatch.logging_config import get_logger

# Conditional import for pywin32
if os.name == 'nt':
    try:
        import msvcrt

        import win32file
    except ImportError:
        win32file = None
else:
    win32file = None

logger = get_logger(__name__)

_warned_no_pywin32 = False


def _open_windows_shared(path: str) -> BinaryIO:
    """Open a file with FILE_SHARE_READ | FILE_SHARE_WRITE | FILE_SHARE_DELETE."""
    share_mode = (
        win32file.FILE_SHARE_READ |
        win32file.FILE_SHARE_WRITE |
        win32file.FILE_SHARE_DELETE
    )
    try:
        handle = win32file.CreateFile(
            path,
            win32file.GENERIC_READ,
            share_mode,
            None,
            win32file.OPEN_EXISTING,
            win32file.FILE_ATTRIBUTE_NORMAL,
            None
        )
    except win32file.error as e:
        # Let Python map the Windows error code onto FileNotFoundError etc.
        raise OSError(None, e.strerror, path, e.winerror) from e

    fd = msvcrt.open_osfhandle(handle.Detach(), os.O_RDONLY | os.O_BINARY)
    return os.fdopen(fd, "rb")


def open_shared(path: str) -> BinaryIO:
    """
    Open a file for binary reading without blocking other writers.

    - On POSIX, a plain open already allows concurrent writers and deleters.
    - On Windows, pywin32 is used to request full sharing.

    Args:
        path: The path to the file.

    Returns:
        A binary file object positioned at offset 0.

    Raises:
        OSError: If the file cannot be opened (missing, denied, locked).
    """
    global _warned_no_pywin32  # pylint: disable=global-statement

    if os.name == 'nt':
        if win32file:
            return _open_windows_shared(path)
        if not _warned_no_pywin32:
            logger.warning(
                "pywin32 is not installed, log file is opened without delete sharing."
            )
            _warned_no_pywin32 = True

    return open(path, "rb")  # pylint: disable=consider-using-with


def file_size(fh: BinaryIO) -> int:
    """Return the current size in bytes of an open file."""
    return os.fstat(fh.fileno()).st_size
