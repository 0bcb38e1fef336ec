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

import io
import threading
from unittest import TestCase

from s3multipart.datatypes import Part
from s3multipart.parts import PartMetadata
from s3multipart.thread_pool import PartUploadPool, default_parallelism


def _part(part_number):
    return PartMetadata(part_number, size=1, reader=io.BytesIO(b"x"))


class PartUploadPoolTest(TestCase):
    def test_default_parallelism(self):
        self.assertGreaterEqual(default_parallelism(), 1)
        pool = PartUploadPool(lambda part: None)
        self.assertEqual(pool.num_threads, default_parallelism())

    def test_uploads_all_parts(self):
        def upload(part):
            return Part(part.part_number, f"etag-{part.part_number}", size=1)

        pool = PartUploadPool(upload, 3).start_parallel()
        parts = [_part(number) for number in range(1, 11)]
        for part in parts:
            self.assertTrue(pool.add_task(part))
        results = pool.shutdown()
        self.assertEqual(sorted(results), list(range(1, 11)))
        self.assertEqual(results[4].etag, "etag-4")
        self.assertIsNone(pool.failure())
        self.assertTrue(all(part.closed for part in parts))

    def test_in_flight_parts_are_bounded(self):
        lock = threading.Lock()
        state = {"current": 0, "peak": 0}

        def upload(part):
            with lock:
                state["current"] += 1
                state["peak"] = max(state["peak"], state["current"])
            threading.Event().wait(0.01)
            with lock:
                state["current"] -= 1
            return Part(part.part_number, "etag", size=1)

        pool = PartUploadPool(upload, 2).start_parallel()
        for number in range(1, 9):
            pool.add_task(_part(number))
        pool.shutdown()
        self.assertLessEqual(state["peak"], 2)

    def test_fail_fast(self):
        calls = []

        def upload(part):
            calls.append(part.part_number)
            if part.part_number == 2:
                raise OSError("connection reset")
            return Part(part.part_number, "etag", size=1)

        pool = PartUploadPool(upload, 1).start_parallel()
        parts = [_part(number) for number in range(1, 6)]
        added = [pool.add_task(part) for part in parts]
        results = pool.shutdown()

        self.assertEqual(added, [True, True, False, False, False])
        self.assertEqual(calls, [1, 2])
        self.assertEqual(sorted(results), [1])
        part_number, exc = pool.failure()
        self.assertEqual(part_number, 2)
        self.assertIsInstance(exc, OSError)
        self.assertTrue(all(part.closed for part in parts))

    def test_cancelled_pool_rejects_parts(self):
        cancel_event = threading.Event()
        calls = []

        def upload(part):
            calls.append(part.part_number)
            return Part(part.part_number, "etag", size=1)

        pool = PartUploadPool(upload, 2, cancel_event).start_parallel()
        cancel_event.set()
        part = _part(1)
        self.assertFalse(pool.add_task(part))
        pool.shutdown()
        self.assertTrue(part.closed)
        self.assertEqual(calls, [])

    def test_results_are_drained_once(self):
        pool = PartUploadPool(
            lambda part: Part(part.part_number, "etag", size=1), 1,
        ).start_parallel()
        pool.add_task(_part(1))
        drained = pool.shutdown()
        self.assertEqual(list(drained), [1])
        self.assertEqual(pool.results(), {})
