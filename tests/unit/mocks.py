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

import hashlib
import threading

from urllib3._collections import HTTPHeaderDict

from s3multipart.datatypes import Part
from s3multipart.helpers import ObjectWriteResult


class MockResponse:
    def __init__(self, method, url, status_code, response_headers=None,
                 content=None):
        self.method = method
        self.url = url
        self.status = status_code
        self.headers = HTTPHeaderDict(response_headers or {})
        if isinstance(content, str):
            content = content.encode()
        self.data = content or b""
        self.request_headers = None
        self.request_body = None

    def read(self, amt=None, cache_content=False):
        return self.data

    def release_conn(self):
        return


class MockConnection:
    """Replays queued responses in order and records the requests."""

    def __init__(self):
        self.responses = []
        self.requests = []

    def mock_add_request(self, response):
        self.responses.append(response)

    def urlopen(self, method, url, body=None, headers=None,
                preload_content=True, **kwargs):
        response = self.responses.pop(0)
        if response.method != method or response.url != url:
            raise AssertionError(
                f"expected {response.method} {response.url}, "
                f"got {method} {url}",
            )
        if body is not None and not isinstance(body, bytes):
            body = body.read()
        response.request_headers = HTTPHeaderDict(headers or {})
        response.request_body = body
        self.requests.append(response)
        return response

    def clear(self):
        return


class FakeS3:
    """In-memory multipart upload service."""

    def __init__(self, fail_part=None, short_ack_part=None,
                 on_upload=None):
        self.fail_part = fail_part
        self.short_ack_part = short_ack_part
        self.on_upload = on_upload
        self.uploads = {}
        self.objects = {}
        self.headers = {}
        self.uploaded_part_numbers = []
        self.aborted = []
        self._lock = threading.Lock()
        self._next_id = 0

    def create_multipart_upload(self, bucket_name, object_name, headers):
        with self._lock:
            self._next_id += 1
            upload_id = f"upload-{self._next_id}"
            self.uploads[upload_id] = {}
            self.headers[upload_id] = dict(headers)
        return upload_id

    def add_part(self, upload_id, part_number, data):
        self.uploads.setdefault(upload_id, {})[part_number] = data

    def list_parts(self, bucket_name, object_name, upload_id):
        for part_number in sorted(self.uploads[upload_id]):
            data = self.uploads[upload_id][part_number]
            yield Part(
                part_number, hashlib.md5(data).hexdigest(), size=len(data),
            )

    def upload_part(self, bucket_name, object_name, upload_id, part_number,
                    data, length, md5sum=None, sha256sum=None):
        content = data.read()
        with self._lock:
            self.uploaded_part_numbers.append(part_number)
        if self.on_upload:
            self.on_upload(part_number)
        if part_number == self.fail_part:
            raise OSError(f"connection reset while uploading {part_number}")
        if md5sum is not None and md5sum != hashlib.md5(content).digest():
            raise ValueError(f"bad Content-MD5 for part {part_number}")
        with self._lock:
            self.uploads[upload_id][part_number] = content
        size = len(content)
        if part_number == self.short_ack_part:
            size -= 1
        return Part(part_number, hashlib.md5(content).hexdigest(), size=size)

    def complete_multipart_upload(self, bucket_name, object_name, upload_id,
                                  parts):
        stored = self.uploads.pop(upload_id)
        self.objects[object_name] = b"".join(
            stored[part.part_number] for part in parts
        )
        return ObjectWriteResult(
            bucket_name, object_name, None, "final-etag", None,
            upload_id=upload_id,
        )

    def abort_multipart_upload(self, bucket_name, object_name, upload_id):
        self.aborted.append(upload_id)
        self.uploads.pop(upload_id, None)


class Progress:
    def __init__(self):
        self.object_name = None
        self.total_length = None
        self.updates = []

    def set_meta(self, object_name, total_length):
        self.object_name = object_name
        self.total_length = total_length

    def update(self, length):
        self.updates.append(length)

    @property
    def total(self):
        return sum(self.updates)


class ReadOnlyStream:
    """Stream without seek() and tell()."""

    def __init__(self, data):
        self._data = data
        self._offset = 0

    def read(self, size=-1):
        if size is None or size < 0:
            size = len(self._data) - self._offset
        data = self._data[self._offset:self._offset + size]
        self._offset += len(data)
        return data
