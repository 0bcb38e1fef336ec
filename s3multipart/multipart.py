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
s3multipart.multipart
~~~~~~~~~~~~~~~~~~~~~

Drives one multipart upload: opens or resumes the session, feeds produced
parts to the upload pool and completes the upload with a validated part
manifest. A failed or cancelled upload is left open on the server so it
can be resumed with its upload ID.

:copyright: (c) 2025 by MinIO, Inc.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import annotations

import logging
import threading
from typing import BinaryIO, Iterator, Mapping, Optional

from typing_extensions import Protocol

from .datatypes import Part, PartPlan, UploadSession
from .error import (InvalidPartsError, PartUploadError, UnexpectedEOFError,
                    UploadCancelledError)
from .helpers import ObjectWriteResult, ProgressType
from .parts import PartMetadata, PartProducer
from .reconcile import get_missing_parts_info, reconcile_parts
from .thread_pool import PartUploadPool

logger = logging.getLogger(__name__)


class MultipartAPI(Protocol):
    """typing stub for the S3 calls a multipart upload needs."""

    def create_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            headers: Mapping[str, str],
    ) -> str:
        """Create multipart upload and return its upload ID."""

    def list_parts(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
    ) -> Iterator[Part]:
        """Iterate every part uploaded so far."""

    def upload_part(  # pylint: disable=too-many-positional-arguments
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
            part_number: int,
            data: BinaryIO,
            length: int,
            md5sum: Optional[bytes] = None,
            sha256sum: Optional[bytes] = None,
    ) -> Part:
        """Upload one part and return it with its ETag and size."""

    def complete_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
            parts: list[Part],
    ) -> ObjectWriteResult:
        """Complete multipart upload with given parts."""

    def abort_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
    ):
        """Abort multipart upload."""


def build_manifest(  # pylint: disable=too-many-positional-arguments
        reusable: Mapping[int, Part],
        uploaded: Mapping[int, Part],
        expected_count: int,
        expected_size: int,
        bucket_name: Optional[str] = None,
        object_name: Optional[str] = None,
) -> list[Part]:
    """
    Merge reused and uploaded parts into the part list of a
    CompleteMultipartUpload request.

    :param reusable: Parts kept from an earlier attempt.
    :param uploaded: Parts uploaded by this attempt; they win over reused
        parts of the same number.
    :param expected_count: Number of parts the object must have.
    :param expected_size: Size the parts must add up to.
    :return: Parts sorted by part number.

    :raises InvalidPartsError: if parts are not exactly 1..expected_count.
    :raises UnexpectedEOFError: if part sizes do not add up.

    Sizes of uploaded parts are the lengths the client sent, since the
    UploadPart response carries no size; only sizes reported by ListParts
    for reused parts come from the server. The size check therefore
    catches parts lost or shortened on the server side only when they were
    listed, plus any mismatch between the plan and what was produced.
    """
    merged = dict(reusable)
    merged.update(uploaded)
    parts = [merged[part_number] for part_number in sorted(merged)]

    if [part.part_number for part in parts] != list(
            range(1, expected_count + 1),
    ):
        raise InvalidPartsError(expected_count, len(parts))

    total = sum(part.size or 0 for part in parts)
    if total != expected_size:
        raise UnexpectedEOFError(
            total, expected_size, bucket_name, object_name,
        )
    return parts


class MultipartUploader:
    """
    Multipart upload of one object through a :class:`MultipartAPI`.

    Example::
        uploader = MultipartUploader(client, "my-bucket", "my-object")
        plan = optimal_part_info(size)
        with open("my-file", "rb") as data:
            result = uploader.upload(data, plan)
    """

    def __init__(  # pylint: disable=too-many-positional-arguments
            self,
            api: MultipartAPI,
            bucket_name: str,
            object_name: str,
            num_threads: int = 0,
            progress: Optional[ProgressType] = None,
            cancel_event: Optional[threading.Event] = None,
            compute_sha256: bool = False,
    ):
        self._api = api
        self._bucket_name = bucket_name
        self._object_name = object_name
        self._num_threads = num_threads
        self._progress = progress
        self._cancel_event = cancel_event
        self._compute_sha256 = compute_sha256

    def _cancelled(self) -> bool:
        return bool(self._cancel_event and self._cancel_event.is_set())

    def _open_session(
            self,
            headers: dict[str, str],
            upload_id: Optional[str],
    ) -> UploadSession:
        content_type = headers.get(
            "Content-Type", "application/octet-stream",
        )
        if upload_id:
            logger.info(
                "resuming multipart upload %s of %s/%s",
                upload_id, self._bucket_name, self._object_name,
            )
            return UploadSession(
                self._bucket_name, self._object_name, upload_id,
                content_type, resumed=True,
            )

        upload_id = self._api.create_multipart_upload(
            self._bucket_name, self._object_name, headers,
        )
        logger.info(
            "created multipart upload %s of %s/%s",
            upload_id, self._bucket_name, self._object_name,
        )
        return UploadSession(
            self._bucket_name, self._object_name, upload_id, content_type,
        )

    def _upload_func(self, session: UploadSession):
        def upload(part: PartMetadata) -> Part:
            return self._api.upload_part(
                session.bucket_name,
                session.object_name,
                session.upload_id,
                part.part_number,
                part.reader,
                part.size,
                md5sum=part.md5sum,
                sha256sum=part.sha256sum,
            )
        return upload

    def _check(self, pool: PartUploadPool, session: UploadSession):
        failure = pool.failure()
        if failure:
            part_number, exc = failure
            raise PartUploadError(
                part_number, session.upload_id, exc,
            ) from exc
        if self._cancelled():
            raise UploadCancelledError(session.upload_id)

    def _collect(self, uploaded: dict[int, Part], finished: dict[int, Part]):
        for part_number in sorted(finished):
            part = finished[part_number]
            logger.debug(
                "uploaded part %d of %s/%s", part_number,
                self._bucket_name, self._object_name,
            )
            uploaded[part_number] = part
            if self._progress:
                self._progress.update(part.size or 0)

    def _credit(self, parts: Mapping[int, Part]):
        if parts:
            logger.info(
                "reusing %d uploaded parts of %s/%s",
                len(parts), self._bucket_name, self._object_name,
            )
        if self._progress:
            size = sum(part.size or 0 for part in parts.values())
            if size:
                self._progress.update(size)

    def upload(
            self,
            data: BinaryIO,
            plan: PartPlan,
            headers: Optional[Mapping[str, str]] = None,
            upload_id: Optional[str] = None,
    ) -> ObjectWriteResult:
        """
        Upload data as parts of given plan and complete the upload.

        :param data: Stream to read the object from, positioned at its start.
        :param plan: Part geometry from ``optimal_part_info()``.
        :param headers: Headers of CreateMultipartUpload request.
        :param upload_id: Upload ID of an open upload to resume; parts
            already uploaded with the expected size are not sent again.
        :return: :class:`ObjectWriteResult` object.

        :raises PartUploadError: if a part upload failed.
        :raises UploadCancelledError: if the cancel event was set.
        """
        session = self._open_session(dict(headers or {}), upload_id)
        reusable: dict[int, Part] = {}
        missing = get_missing_parts_info(reusable, plan)
        if session.resumed:
            reusable, missing = reconcile_parts(
                self._api.list_parts(
                    session.bucket_name, session.object_name,
                    session.upload_id,
                ),
                plan,
            )

        producer = PartProducer(
            data, plan, missing, reusable,
            compute_sha256=self._compute_sha256,
            cancel_event=self._cancel_event,
        )
        if producer.random_access:
            self._credit(reusable)
        pool = PartUploadPool(
            self._upload_func(session), self._num_threads, self._cancel_event,
        )
        uploaded: dict[int, Part] = {}
        try:
            producer.start()
            pool.start_parallel()
            for part in producer:
                try:
                    if part.error is not None:
                        raise part.error
                    self._check(pool, session)
                except BaseException:
                    part.close()
                    raise
                if not pool.add_task(part):
                    self._check(pool, session)
                self._collect(uploaded, pool.results())
            self._collect(uploaded, pool.shutdown())
            self._check(pool, session)

            if not producer.random_access:
                reusable = producer.reused
                self._credit(reusable)

            if plan.is_unknown_size:
                expected_count = producer.part_count
                expected_size = producer.total_read
            else:
                expected_count = plan.part_count
                expected_size = plan.object_size
            parts = build_manifest(
                reusable, uploaded, expected_count, expected_size,
                session.bucket_name, session.object_name,
            )
            result = self._api.complete_multipart_upload(
                session.bucket_name, session.object_name,
                session.upload_id, parts,
            )
        except BaseException as exc:
            logger.warning(
                "multipart upload %s of %s/%s left open; %s",
                session.upload_id, session.bucket_name, session.object_name,
                exc,
            )
            raise
        finally:
            producer.stop()
            pool.shutdown()

        logger.info(
            "completed multipart upload %s of %s/%s with %d parts",
            session.upload_id, session.bucket_name, session.object_name,
            len(parts),
        )
        return ObjectWriteResult(
            result.bucket_name,
            result.object_name,
            result.version_id,
            result.etag,
            result.http_headers,
            location=result.location,
            upload_id=session.upload_id,
            size=expected_size,
        )
