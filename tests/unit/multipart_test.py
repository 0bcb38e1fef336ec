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
from unittest import TestCase, mock

from s3multipart.datatypes import Part, PartPlan
from s3multipart.error import (InvalidPartsError, PartUploadError,
                               UnexpectedEOFError, UnexpectedShortReadError,
                               UploadCancelledError)
from s3multipart.multipart import MultipartUploader, build_manifest
from s3multipart.thread_pool import PartUploadPool

from .mocks import FakeS3, Progress, ReadOnlyStream

DATA = bytes(range(100))
# Parts of 30, 30, 30 and 10 bytes.
PLAN = PartPlan(object_size=100, part_size=30, part_count=4,
                last_part_size=10)
UNKNOWN = PartPlan(object_size=-1, part_size=30, part_count=10000,
                   last_part_size=30)


def _part(part_number, size):
    return Part(part_number, f"etag-{part_number}", size=size)


class BuildManifestTest(TestCase):
    def test_merge_and_sort(self):
        parts = build_manifest(
            {1: _part(1, 30), 3: _part(3, 30)},
            {4: _part(4, 10), 2: _part(2, 30)},
            4, 100,
        )
        self.assertEqual([part.part_number for part in parts], [1, 2, 3, 4])

    def test_uploaded_parts_win(self):
        uploaded = Part(1, "new", size=30)
        parts = build_manifest({1: _part(1, 30)}, {1: uploaded}, 1, 30)
        self.assertEqual(parts, [uploaded])

    def test_missing_part(self):
        with self.assertRaises(InvalidPartsError) as ctx:
            build_manifest({1: _part(1, 30)}, {3: _part(3, 30)}, 3, 90)
        self.assertEqual(ctx.exception.expected, 3)
        self.assertEqual(ctx.exception.actual, 2)

    def test_extra_part(self):
        self.assertRaises(
            InvalidPartsError,
            build_manifest, {}, {1: _part(1, 30), 2: _part(2, 30)}, 1, 30,
        )

    def test_size_mismatch(self):
        with self.assertRaises(UnexpectedEOFError) as ctx:
            build_manifest(
                {}, {1: _part(1, 30), 2: _part(2, 29)}, 2, 60,
                "bucket", "object",
            )
        self.assertEqual(ctx.exception.total_read, 59)
        self.assertEqual(ctx.exception.total_size, 60)
        self.assertEqual(ctx.exception.object_name, "object")


class MultipartUploaderTest(TestCase):
    def _uploader(self, server, **kwargs):
        return MultipartUploader(server, "bucket", "object", **kwargs)

    def test_upload_seekable(self):
        server = FakeS3()
        progress = Progress()
        result = self._uploader(server, num_threads=3, progress=progress)\
            .upload(io.BytesIO(DATA), PLAN, {"Content-Type": "text/plain"})
        self.assertEqual(server.objects["object"], DATA)
        self.assertEqual(sorted(server.uploaded_part_numbers), [1, 2, 3, 4])
        self.assertEqual(result.upload_id, "upload-1")
        self.assertEqual(result.size, 100)
        self.assertEqual(result.etag, "final-etag")
        self.assertEqual(progress.total, 100)
        self.assertEqual(server.headers["upload-1"]["Content-Type"],
                         "text/plain")

    def test_upload_forward_only(self):
        server = FakeS3()
        self._uploader(server, num_threads=2).upload(
            ReadOnlyStream(DATA), PLAN,
        )
        self.assertEqual(server.objects["object"], DATA)

    def test_upload_unknown_size(self):
        server = FakeS3()
        result = self._uploader(server).upload(ReadOnlyStream(DATA), UNKNOWN)
        self.assertEqual(server.objects["object"], DATA)
        self.assertEqual(result.size, 100)
        self.assertEqual(sorted(server.uploaded_part_numbers), [1, 2, 3, 4])

    def test_resume_uploads_missing_parts_only(self):
        server = FakeS3()
        server.add_part("upload-x", 1, DATA[:30])
        server.add_part("upload-x", 2, DATA[30:60])
        progress = Progress()
        result = self._uploader(server, progress=progress).upload(
            io.BytesIO(DATA), PLAN, upload_id="upload-x",
        )
        self.assertEqual(sorted(server.uploaded_part_numbers), [3, 4])
        self.assertEqual(server.objects["object"], DATA)
        self.assertEqual(result.upload_id, "upload-x")
        self.assertEqual(progress.total, 100)

    def test_resume_complete_upload_sends_no_parts(self):
        server = FakeS3()
        for number, start in enumerate(range(0, 100, 30), 1):
            server.add_part("upload-x", number, DATA[start:start + 30])
        self._uploader(server).upload(
            io.BytesIO(DATA), PLAN, upload_id="upload-x",
        )
        self.assertEqual(server.uploaded_part_numbers, [])
        self.assertEqual(server.objects["object"], DATA)

    def test_resume_forward_only_checks_content(self):
        server = FakeS3()
        server.add_part("upload-x", 1, DATA[:30])
        server.add_part("upload-x", 2, bytes(30))
        self._uploader(server).upload(
            ReadOnlyStream(DATA), PLAN, upload_id="upload-x",
        )
        self.assertEqual(sorted(server.uploaded_part_numbers), [2, 3, 4])
        self.assertEqual(server.objects["object"], DATA)

    def test_resume_replaces_part_of_wrong_size(self):
        server = FakeS3()
        server.add_part("upload-x", 1, DATA[:30])
        server.add_part("upload-x", 2, DATA[30:45])
        self._uploader(server).upload(
            io.BytesIO(DATA), PLAN, upload_id="upload-x",
        )
        self.assertEqual(sorted(server.uploaded_part_numbers), [2, 3, 4])
        self.assertEqual(server.objects["object"], DATA)

    def test_part_failure_leaves_upload_open(self):
        server = FakeS3(fail_part=2)
        with self.assertRaises(PartUploadError) as ctx:
            self._uploader(server, num_threads=1).upload(
                io.BytesIO(DATA), PLAN,
            )
        self.assertEqual(ctx.exception.part_number, 2)
        self.assertEqual(ctx.exception.upload_id, "upload-1")
        self.assertIsInstance(ctx.exception.cause, OSError)
        self.assertIs(ctx.exception.__cause__, ctx.exception.cause)
        self.assertEqual(server.uploaded_part_numbers, [1, 2])
        self.assertEqual(server.aborted, [])
        self.assertIn("upload-1", server.uploads)
        self.assertNotIn("object", server.objects)

    def test_failed_upload_resumes(self):
        server = FakeS3(fail_part=3)
        with self.assertRaises(PartUploadError) as ctx:
            self._uploader(server, num_threads=1).upload(
                io.BytesIO(DATA), PLAN,
            )
        server.fail_part = None
        server.uploaded_part_numbers = []
        self._uploader(server).upload(
            io.BytesIO(DATA), PLAN, upload_id=ctx.exception.upload_id,
        )
        self.assertEqual(sorted(server.uploaded_part_numbers), [3, 4])
        self.assertEqual(server.objects["object"], DATA)

    def test_forward_only_failure_releases_temp_files(self):
        files = []

        def new_temp_part():
            temp = io.BytesIO()
            files.append(temp)
            return temp

        server = FakeS3(fail_part=1)
        with mock.patch("s3multipart.parts.new_temp_part", new_temp_part):
            self.assertRaises(
                PartUploadError,
                self._uploader(server, num_threads=1).upload,
                ReadOnlyStream(DATA), PLAN,
            )
        self.assertTrue(files)
        self.assertTrue(all(temp.closed for temp in files))

    def test_cancel(self):
        cancel_event = threading.Event()
        server = FakeS3(on_upload=lambda number: cancel_event.set())
        with self.assertRaises(UploadCancelledError) as ctx:
            self._uploader(
                server, num_threads=1, cancel_event=cancel_event,
            ).upload(io.BytesIO(DATA), PLAN)
        self.assertEqual(ctx.exception.upload_id, "upload-1")
        self.assertEqual(server.uploaded_part_numbers, [1])
        self.assertNotIn("object", server.objects)

    def test_short_source(self):
        server = FakeS3()
        self.assertRaises(
            UnexpectedShortReadError,
            self._uploader(server).upload, io.BytesIO(DATA[:50]), PLAN,
        )
        self.assertNotIn("object", server.objects)

    def test_short_acknowledged_part(self):
        server = FakeS3(short_ack_part=2)
        with self.assertRaises(UnexpectedEOFError) as ctx:
            self._uploader(server).upload(io.BytesIO(DATA), PLAN)
        self.assertEqual(ctx.exception.total_read, 99)
        self.assertEqual(ctx.exception.total_size, 100)
        self.assertNotIn("object", server.objects)

    def test_sha256_is_passed_when_requested(self):
        server = FakeS3()
        seen = []
        upload_part = server.upload_part

        def record(*args, **kwargs):
            seen.append(kwargs.get("sha256sum"))
            return upload_part(*args, **kwargs)

        server.upload_part = record
        self._uploader(server, compute_sha256=True).upload(
            io.BytesIO(DATA), PLAN,
        )
        self.assertEqual(len(seen), 4)
        self.assertTrue(all(len(value) == 32 for value in seen))


class GatedStream(ReadOnlyStream):
    """Forward-only stream blocking reads past ``gate_offset`` until open."""

    def __init__(self, data, gate_offset, gate):
        super().__init__(data)
        self._gate_offset = gate_offset
        self._gate = gate

    def read(self, size=-1):
        if self._offset >= self._gate_offset:
            self._gate.wait(5)
        return super().read(size)


class FailedUploadCleanupTest(TestCase):
    def test_part_taken_after_failure_is_released(self):
        files = []
        pools = []

        def new_temp_part():
            temp = io.BytesIO()
            files.append(temp)
            return temp

        def new_pool(*args, **kwargs):
            pools.append(PartUploadPool(*args, **kwargs))
            return pools[-1]

        class FailureGate:
            def wait(self, timeout):
                # Opens once the first part failed, so the driver receives
                # the second part with the failure already published.
                pools[0]._failed_event.wait(timeout)

        server = FakeS3(fail_part=1)
        stream = GatedStream(DATA, 30, FailureGate())
        with mock.patch("s3multipart.parts.new_temp_part", new_temp_part), \
                mock.patch("s3multipart.multipart.PartUploadPool", new_pool):
            with self.assertRaises(PartUploadError) as ctx:
                MultipartUploader(
                    server, "bucket", "object", num_threads=1,
                ).upload(stream, PLAN)
        self.assertEqual(ctx.exception.part_number, 1)
        self.assertEqual(server.uploaded_part_numbers, [1])
        self.assertGreaterEqual(len(files), 2)
        self.assertEqual([temp for temp in files if not temp.closed], [])
