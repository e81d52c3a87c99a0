"""
File timestamp writing.

macOS lets a process set a file's creation (birth) time; the attribute list
call used here writes creation and modification time together. Other
platforms only expose access/modification times, so creation time is left
as the filesystem reports it.
"""

import ctypes
import ctypes.util
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# <sys/attr.h>
ATTR_BIT_MAP_COUNT = 5
ATTR_CMN_CRTIME = 0x00000200
ATTR_CMN_MODTIME = 0x00000400


class _AttrList(ctypes.Structure):
    _fields_ = [
        ("bitmapcount", ctypes.c_ushort),
        ("reserved", ctypes.c_uint16),
        ("commonattr", ctypes.c_uint32),
        ("volattr", ctypes.c_uint32),
        ("dirattr", ctypes.c_uint32),
        ("fileattr", ctypes.c_uint32),
        ("forkattr", ctypes.c_uint32),
    ]


class _Timespec(ctypes.Structure):
    _fields_ = [("tv_sec", ctypes.c_long), ("tv_nsec", ctypes.c_long)]


class _CreatedModified(ctypes.Structure):
    # Attribute values are packed in bit order: CRTIME before MODTIME
    _fields_ = [("created", _Timespec), ("modified", _Timespec)]


def _timespec(value: datetime) -> _Timespec:
    ns = int(value.timestamp() * 1_000_000_000)
    return _Timespec(ns // 1_000_000_000, ns % 1_000_000_000)


def supports_creation_time() -> bool:
    """Return True if this platform can write file creation times."""
    return sys.platform == "darwin"


def _set_times_darwin(path: Path, created: datetime, modified: datetime) -> None:
    libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)
    setattrlist = libc.setattrlist
    setattrlist.argtypes = [
        ctypes.c_char_p,
        ctypes.POINTER(_AttrList),
        ctypes.c_void_p,
        ctypes.c_size_t,
        ctypes.c_ulong,
    ]
    setattrlist.restype = ctypes.c_int

    attr_list = _AttrList(
        bitmapcount=ATTR_BIT_MAP_COUNT,
        commonattr=ATTR_CMN_CRTIME | ATTR_CMN_MODTIME,
    )
    values = _CreatedModified(_timespec(created), _timespec(modified))

    result = setattrlist(
        os.fsencode(path), ctypes.byref(attr_list), ctypes.byref(values), ctypes.sizeof(values), 0
    )
    if result != 0:
        err = ctypes.get_errno()
        raise OSError(err, os.strerror(err), str(path))


def _set_times_portable(path: Path, modified: datetime) -> None:
    # Access time is preserved; only the modification time changes
    access_ns = os.stat(path).st_atime_ns
    modified_ns = int(modified.timestamp() * 1_000_000_000)
    os.utime(path, ns=(access_ns, modified_ns))


def set_file_times(path: Path, created: datetime, modified: datetime) -> bool:
    """
    Set a file's creation and modification time in a single write.

    Args:
        path: File to update
        created: New creation time
        modified: New modification time

    Returns:
        bool: True if the creation time was written too, False if the
        platform only allowed the modification time

    Raises:
        OSError: If the attributes cannot be written
    """
    path = Path(path)
    if supports_creation_time():
        _set_times_darwin(path, created, modified)
        return True

    _set_times_portable(path, modified)
    logger.debug(f"Creation time not settable on {sys.platform}; only modified time written for {path.name}")
    return False
