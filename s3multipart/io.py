# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage, (C)
# 2015 MinIO, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
s3multipart.io
~~~~~~~~~~~~~~

Positional readers over a seekable source and the temporary files used to
spill parts of forward-only streams.

:copyright: (c) 2015 by MinIO, Inc.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import annotations

import io
import os
import tempfile
import threading
from typing import BinaryIO, Iterator, Optional

READ_CHUNK_SIZE = 1024 * 1024  # 1MiB


def is_random_access(stream) -> bool:
    """Check whether stream supports seek() and tell()."""
    seekable = getattr(stream, "seekable", None)
    if callable(seekable):
        try:
            return bool(seekable())
        except (OSError, ValueError):
            return False
    return callable(getattr(stream, "seek", None)) and callable(
        getattr(stream, "tell", None),
    )


class ReaderAt:
    """
    Reads bytes at absolute offsets of a seekable stream, relative to the
    position the stream had when this reader was created. Safe to share
    between threads.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._base = stream.tell()
        self._lock = threading.Lock()
        self._fileno: Optional[int] = None
        if hasattr(os, "pread"):
            try:
                self._fileno = stream.fileno()
            except (AttributeError, OSError, io.UnsupportedOperation):
                self._fileno = None

    def read_at(self, offset: int, size: int) -> bytes:
        """Read up to size bytes at offset; shorter only at EOF."""
        if size <= 0:
            return b""
        position = self._base + offset
        if self._fileno is not None:
            data = b""
            while len(data) < size:
                chunk = os.pread(
                    self._fileno, size - len(data), position + len(data),
                )
                if not chunk:
                    break
                data += chunk
            return data

        with self._lock:
            self._stream.seek(position)
            data = b""
            while len(data) < size:
                chunk = self._stream.read(size - len(data))
                if not chunk:
                    break
                if not isinstance(chunk, bytes):
                    raise ValueError("read() must return 'bytes' object")
                data += chunk
            return data

    def chunks(
            self,
            offset: int,
            size: int,
            chunk_size: int = READ_CHUNK_SIZE,
    ) -> Iterator[bytes]:
        """Yield bytes of [offset, offset+size) in chunks until EOF."""
        end = offset + size
        while offset < end:
            data = self.read_at(offset, min(chunk_size, end - offset))
            if not data:
                return
            offset += len(data)
            yield data


class SectionReader(io.RawIOBase):
    """
    Seekable, read only window of ``size`` bytes starting at ``offset`` of a
    :class:`ReaderAt`. Closing it leaves the underlying stream open.
    """

    def __init__(self, reader: ReaderAt, offset: int, size: int):
        super().__init__()
        self._reader = reader
        self._offset = offset
        self._size = size
        self._position = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def tell(self) -> int:
        return self._position

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            position = self._size + offset
        else:
            raise ValueError(f"invalid whence {whence}")
        if position < 0:
            raise ValueError(f"negative seek position {position}")
        self._position = position
        return position

    def readinto(self, buffer) -> int:
        data = self.read(len(buffer))
        buffer[:len(data)] = data
        return len(data)

    def read(self, size: int = -1) -> bytes:
        remaining = self._size - self._position
        if remaining <= 0:
            return b""
        if size is None or size < 0 or size > remaining:
            size = remaining
        data = self._reader.read_at(self._offset + self._position, size)
        self._position += len(data)
        return data

    def __len__(self) -> int:
        return self._size


def new_temp_part() -> BinaryIO:
    """Create anonymous temporary file removed on close."""
    return tempfile.TemporaryFile(prefix="s3multipart-part-")


def spill(
        stream: BinaryIO,
        size: int,
        sink: BinaryIO,
        observer=None,
        carry: bytes = b"",
) -> int:
    """
    Copy up to size bytes from stream into sink, starting with carry bytes
    kept from a previous read. Every copied chunk is passed to
    ``observer.update()``. Return number of bytes copied.
    """
    copied = 0
    if carry:
        carry = carry[:size]
        sink.write(carry)
        if observer:
            observer.update(carry)
        copied = len(carry)
    while copied < size:
        data = stream.read(min(READ_CHUNK_SIZE, size - copied))
        if not data:
            break  # EOF reached
        if not isinstance(data, bytes):
            raise ValueError("read() must return 'bytes' object")
        sink.write(data)
        if observer:
            observer.update(data)
        copied += len(data)
    return copied
