# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage, (C)
# [2014] - [2025] MinIO, Inc.
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
s3multipart.parts
~~~~~~~~~~~~~~~~~

Splits a data source into parts for upload. A seekable source gives every
part a window reader over the source itself; a forward-only stream has each
part spilled into a temporary file. Parts are produced by one background
thread into a small bounded queue, so reading never runs more than a few
parts ahead of the uploads.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import BinaryIO, Iterator, Optional

from .checksum import PartHashers, hex_string
from .datatypes import MissingPartsInfo, Part, PartPlan
from .error import EntityTooLargeError, UnexpectedShortReadError
from .io import ReaderAt, SectionReader, is_random_access, new_temp_part, spill

logger = logging.getLogger(__name__)

PARTS_QUEUE_SIZE = 3
_POLL_INTERVAL = 0.1  # seconds
_SENTINEL = object()


class PartMetadata:
    """
    One part to upload. It owns ``reader``; ``close()`` releases it, and a
    temporary file is deleted with it. Closing more than once is a no-op.
    """

    def __init__(
            self,
            part_number: int,
            offset: int = 0,
            size: int = 0,
            md5sum: Optional[bytes] = None,
            sha256sum: Optional[bytes] = None,
            reader: Optional[BinaryIO] = None,
            error: Optional[BaseException] = None,
    ):
        self.part_number = part_number
        self.offset = offset
        self.size = size
        self.md5sum = md5sum
        self.sha256sum = sha256sum
        self.reader = reader
        self.error = error
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        """Check whether the part has been released."""
        return self._closed

    def close(self):
        """Release reader of this part exactly once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self.reader is not None:
            self.reader.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, value, traceback):
        self.close()

    def __repr__(self):
        return (
            f"PartMetadata(part_number={self.part_number}, "
            f"offset={self.offset}, size={self.size}, "
            f"error={self.error!r})"
        )


def _is_md5_etag(etag: str) -> bool:
    """Check whether ETag is a plain MD5 hex digest."""
    return len(etag) == 32 and all(c in "0123456789abcdef" for c in etag)


class PartProducer:
    """
    Background producer of :class:`PartMetadata` in increasing part number
    order.

    For a seekable source of known size only part numbers in ``missing`` are
    produced. A forward-only stream must be read entirely, so every part is
    spilled; a part listed in ``reusable`` whose size (and MD5, when its ETag
    is one) matches is released instead of produced, and is reported by
    :attr:`reused`.

    A failure while producing is delivered as a last part carrying
    ``error``. Call :meth:`stop` on every exit path.
    """

    def __init__(
            self,
            data: BinaryIO,
            plan: PartPlan,
            missing: MissingPartsInfo,
            reusable: Optional[dict[int, Part]] = None,
            compute_sha256: bool = False,
            cancel_event: Optional[threading.Event] = None,
            queue_size: int = PARTS_QUEUE_SIZE,
    ):
        self._data = data
        self._plan = plan
        self._missing = missing
        self._reusable = dict(reusable or {})
        self._compute_sha256 = compute_sha256
        self._cancel_event = cancel_event
        self._stop_event = threading.Event()
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._random_access = (
            not plan.is_unknown_size and is_random_access(data)
        )
        self._thread = threading.Thread(
            target=self._run, name="s3multipart-part-producer", daemon=True,
        )
        self.reused: dict[int, Part] = {}
        self.total_read = 0
        self.part_count = 0

    @property
    def random_access(self) -> bool:
        """Check whether parts are windows over the source."""
        return self._random_access

    def start(self) -> PartProducer:
        """Start producer thread."""
        self._thread.start()
        return self

    def _cancelled(self) -> bool:
        return self._stop_event.is_set() or bool(
            self._cancel_event and self._cancel_event.is_set()
        )

    def _put(self, item) -> bool:
        """
        Hand item over to the consumer; blocks while the queue is full.
        On cancellation the item is released and False returned.
        """
        while not self._cancelled():
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        if isinstance(item, PartMetadata):
            item.close()
        return False

    def _run(self):
        try:
            if self._random_access:
                self._produce_sections()
            else:
                self._produce_spilled()
        except Exception as exc:  # pylint: disable=broad-except
            self._put(PartMetadata(self.part_count + 1, error=exc))
        finally:
            self._put(_SENTINEL)

    def _produce_sections(self):
        reader = ReaderAt(self._data)
        for part_number in sorted(self._missing):
            if self._cancelled():
                return
            missing = self._missing[part_number]
            hashers = PartHashers(self._compute_sha256)
            length = hashers.update_all(
                reader.chunks(missing.offset, missing.size),
            )
            if length != missing.size:
                raise UnexpectedShortReadError(
                    missing.offset + length, self._plan.object_size,
                )
            self.part_count = part_number
            part = PartMetadata(
                part_number=part_number,
                offset=missing.offset,
                size=missing.size,
                md5sum=hashers.md5sum,
                sha256sum=hashers.sha256sum,
                reader=SectionReader(reader, missing.offset, missing.size),
            )
            if not self._put(part):
                return

    def _produce_spilled(self):
        plan = self._plan
        carry = b""
        part_number = 0
        while not self._cancelled():
            part_number += 1
            size = plan.size_of(part_number)
            part = self._spill_part(part_number, size, carry)
            self.total_read += part.size
            self.part_count = part_number

            try:
                if plan.is_unknown_size:
                    last = part.size < size
                    if not last:
                        carry = self._data.read(1)
                        last = not carry
                    if not last and part_number == plan.part_count:
                        raise EntityTooLargeError(
                            f"stream has more data than {plan.part_count} "
                            f"parts of {plan.part_size} bytes; maximum "
                            f"object size is {plan.total_size} bytes",
                        )
                elif part.size != size:
                    raise UnexpectedShortReadError(
                        self.total_read, plan.object_size,
                    )
                else:
                    last = part_number == plan.part_count
            except BaseException:
                part.close()
                raise

            if self._reuse(part):
                part.close()
            elif not self._put(part):
                return

            if last:
                return

    def _spill_part(
            self, part_number: int, size: int, carry: bytes,
    ) -> PartMetadata:
        """Copy next part of stream into a temporary file while hashing."""
        temp = new_temp_part()
        try:
            hashers = PartHashers(self._compute_sha256)
            length = spill(self._data, size, temp, hashers, carry)
            temp.seek(0)
        except BaseException:
            temp.close()
            raise
        return PartMetadata(
            part_number=part_number,
            offset=self.total_read,
            size=length,
            md5sum=hashers.md5sum,
            sha256sum=hashers.sha256sum,
            reader=temp,
        )

    def _reuse(self, part: PartMetadata) -> bool:
        """Check whether part already uploaded with the same content."""
        uploaded = self._reusable.get(part.part_number)
        if uploaded is None or uploaded.size != part.size:
            return False
        if (
                _is_md5_etag(uploaded.etag) and
                uploaded.etag != hex_string(part.md5sum or b"")
        ):
            logger.debug(
                "part %d differs from uploaded part; uploading again",
                part.part_number,
            )
            return False
        self.reused[part.part_number] = uploaded
        return True

    def __iter__(self) -> Iterator[PartMetadata]:
        """Yield produced parts until the producer finishes or is stopped."""
        while True:
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                if self._cancelled() or not self._thread.is_alive():
                    if self._queue.empty():
                        return
                continue
            if item is _SENTINEL:
                return
            yield item

    def stop(self):
        """
        Stop producer thread and release every part not handed over yet.
        """
        self._stop_event.set()
        while self._thread.ident is not None:
            self._drain()
            self._thread.join(timeout=_POLL_INTERVAL)
            if not self._thread.is_alive():
                break
        self._drain()

    def _drain(self):
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if isinstance(item, PartMetadata):
                item.close()
