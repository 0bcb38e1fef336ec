# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage, (C)
# 2017 MinIO, Inc.
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
s3multipart.thread_pool
~~~~~~~~~~~~~~~~~~~~~~~

Pool of threads uploading parts with bounded parallelism. Results and
failures are reported per part number.

:copyright: (c) 2017 by MinIO, Inc.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import annotations

import os
import threading
from queue import Empty, Queue
from typing import Callable, Optional

from .datatypes import Part
from .parts import PartMetadata

_POLL_INTERVAL = 0.1  # seconds

UploadFunc = Callable[[PartMetadata], Part]


def default_parallelism() -> int:
    """Get default number of parallel part uploads."""
    return max((os.cpu_count() or 1) - 1, 1)


class Worker(threading.Thread):
    """Thread uploading parts from a given tasks queue."""

    def __init__(
            self,
            upload_func: UploadFunc,
            tasks_queue: Queue,
            results_queue: Queue,
            exceptions_queue: Queue,
            failed_event: threading.Event,
            cancel_event: Optional[threading.Event] = None,
    ):
        super().__init__(name="s3multipart-part-uploader", daemon=True)
        self._upload_func = upload_func
        self._tasks_queue = tasks_queue
        self._results_queue = results_queue
        self._exceptions_queue = exceptions_queue
        self._failed_event = failed_event
        self._cancel_event = cancel_event
        self.start()

    def _skip(self) -> bool:
        return self._failed_event.is_set() or bool(
            self._cancel_event and self._cancel_event.is_set()
        )

    def run(self):
        """Continuously receive parts and upload them."""
        while True:
            task = self._tasks_queue.get()
            if task is None:
                self._tasks_queue.task_done()
                break
            part, cleanup_func = task
            try:
                # Parts queued behind a failure or a cancel are dropped.
                if not self._skip():
                    result = self._upload_func(part)
                    self._results_queue.put((part.part_number, result))
            except Exception as exc:  # pylint: disable=broad-except
                self._exceptions_queue.put((part.part_number, exc))
                self._failed_event.set()
            finally:
                part.close()
                cleanup_func()
                self._tasks_queue.task_done()


class PartUploadPool:
    """
    Pool of ``num_threads`` workers. :meth:`add_task` blocks while
    ``num_threads`` parts are in flight, so no more than that many parts
    are held by the pool.
    """

    def __init__(
            self,
            upload_func: UploadFunc,
            num_threads: int = 0,
            cancel_event: Optional[threading.Event] = None,
    ):
        self._upload_func = upload_func
        self._num_threads = num_threads or default_parallelism()
        self._cancel_event = cancel_event
        self._tasks_queue: Queue = Queue()
        self._results_queue: Queue = Queue()
        self._exceptions_queue: Queue = Queue()
        self._failed_event = threading.Event()
        self._sem = threading.BoundedSemaphore(self._num_threads)
        self._workers: list[Worker] = []
        self._first_failure: Optional[tuple[int, BaseException]] = None

    @property
    def num_threads(self) -> int:
        """Get number of worker threads."""
        return self._num_threads

    def start_parallel(self) -> PartUploadPool:
        """Prepare threads to upload parts."""
        for _ in range(self._num_threads):
            self._workers.append(
                Worker(
                    self._upload_func,
                    self._tasks_queue,
                    self._results_queue,
                    self._exceptions_queue,
                    self._failed_event,
                    self._cancel_event,
                ),
            )
        return self

    def _cancelled(self) -> bool:
        return bool(self._cancel_event and self._cancel_event.is_set())

    def add_task(self, part: PartMetadata) -> bool:
        """
        Submit part for upload; blocks until a worker slot is free. Returns
        False, and releases the part, if an upload failed or the pool was
        cancelled meanwhile.
        """
        while not self._sem.acquire(  # pylint: disable=consider-using-with
                timeout=_POLL_INTERVAL,
        ):
            if self._failed_event.is_set() or self._cancelled():
                part.close()
                return False
        if self._failed_event.is_set() or self._cancelled():
            self._sem.release()
            part.close()
            return False
        self._tasks_queue.put((part, self._sem.release))
        return True

    def failure(self) -> Optional[tuple[int, BaseException]]:
        """Get part number and error of the first failed upload, if any."""
        if self._first_failure is None:
            try:
                self._first_failure = self._exceptions_queue.get_nowait()
            except Empty:
                return None
        return self._first_failure

    def results(self) -> dict[int, Part]:
        """Drain results of uploads finished so far."""
        parts = {}
        while True:
            try:
                part_number, part = self._results_queue.get_nowait()
            except Empty:
                return parts
            parts[part_number] = part

    def shutdown(self) -> dict[int, Part]:
        """
        Stop threads after queued parts are done and return results not
        drained yet.
        """
        # Send None to all threads to cleanly stop them
        for _ in self._workers:
            self._tasks_queue.put(None)
        for worker in self._workers:
            worker.join()
        self._workers = []
        return self.results()
