# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage,
# (C) 2015-2019 MinIO, Inc.
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
s3multipart.error
~~~~~~~~~~~~~~~~~

This module provides custom exception classes for server responses and
for the failure modes of a multipart upload.

:copyright: (c) 2015, 2016, 2017 by MinIO, Inc.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import annotations

from typing import Optional, Type, TypeVar
from xml.etree import ElementTree as ET

from urllib3.response import BaseHTTPResponse

from .xml import findtext


class S3ClientException(Exception):
    """Base s3multipart exception."""


class InvalidResponseError(S3ClientException):
    """Raised to indicate that non-xml response from server."""

    def __init__(
            self, code: int, content_type: Optional[str], body: Optional[str],
    ):
        self._code = code
        self._content_type = content_type
        self._body = body
        super().__init__(
            f"non-XML response from server; Response code: {code}, "
            f"Content-Type: {content_type}, Body: {body}"
        )

    def __reduce__(self):
        return type(self), (self._code, self._content_type, self._body)


class ServerError(S3ClientException):
    """Raised to indicate that S3 service returning HTTP server error."""

    def __init__(self, message: str, status_code: int):
        self._status_code = status_code
        super().__init__(message)

    @property
    def status_code(self) -> int:
        """Get HTTP status code."""
        return self._status_code


A = TypeVar("A", bound="S3Error")


class S3Error(S3ClientException):
    """
    Raised to indicate that error response is received
    when executing S3 operation.
    """

    def __init__(  # pylint: disable=too-many-positional-arguments
        self,
        response: Optional[BaseHTTPResponse],
        code: Optional[str],
        message: Optional[str],
        resource: Optional[str],
        request_id: Optional[str],
        host_id: Optional[str],
        bucket_name: Optional[str] = None,
        object_name: Optional[str] = None,
    ):
        self._response = response
        self._code = code
        self._message = message
        self._resource = resource
        self._request_id = request_id
        self._host_id = host_id
        self._bucket_name = bucket_name
        self._object_name = object_name

        bucket_message = f", bucket_name: {bucket_name}" if bucket_name else ""
        object_message = f", object_name: {object_name}" if object_name else ""

        super().__init__(
            f"S3 operation failed; code: {code}, message: {message}, "
            f"resource: {resource}, request_id: {request_id}, "
            f"host_id: {host_id}{bucket_message}{object_message}"
        )

    @property
    def response(self) -> Optional[BaseHTTPResponse]:
        """Get HTTP response."""
        return self._response

    @property
    def code(self) -> Optional[str]:
        """Get S3 error code."""
        return self._code

    @property
    def message(self) -> Optional[str]:
        """Get S3 error message."""
        return self._message

    @property
    def resource(self) -> Optional[str]:
        """Get resource the error refers to."""
        return self._resource

    @property
    def request_id(self) -> Optional[str]:
        """Get request ID."""
        return self._request_id

    @property
    def host_id(self) -> Optional[str]:
        """Get host ID."""
        return self._host_id

    @property
    def bucket_name(self) -> Optional[str]:
        """Get bucket name."""
        return self._bucket_name

    @property
    def object_name(self) -> Optional[str]:
        """Get object name."""
        return self._object_name

    @classmethod
    def fromxml(cls: Type[A], response: BaseHTTPResponse) -> A:
        """Create new object with values from XML element."""
        element = ET.fromstring(response.data.decode())
        return cls(
            response=response,
            code=findtext(element, "Code"),
            message=findtext(element, "Message"),
            resource=findtext(element, "Resource"),
            request_id=findtext(element, "RequestId"),
            host_id=findtext(element, "HostId"),
            bucket_name=findtext(element, "BucketName"),
            object_name=findtext(element, "Key"),
        )

    def copy(self, code: str, message: str) -> S3Error:
        """Make a copy with replaced code and message."""
        return S3Error(
            response=self._response,
            code=code,
            message=message,
            resource=self._resource,
            request_id=self._request_id,
            host_id=self._host_id,
            bucket_name=self._bucket_name,
            object_name=self._object_name,
        )

    def __reduce__(self):
        return type(self), (
            None, self._code, self._message, self._resource,
            self._request_id, self._host_id, self._bucket_name,
            self._object_name,
        )


class EntityTooLargeError(S3ClientException, ValueError):
    """
    Raised when an object cannot be split into at most 10000 parts, or is
    bigger than the maximum multipart object size.
    """

    def __init__(self, message: str, object_size: int = -1):
        self._object_size = object_size
        super().__init__(message)

    @property
    def object_size(self) -> int:
        """Get size of the object which was rejected."""
        return self._object_size


class InvalidPartSizeError(S3ClientException, ValueError):
    """Raised when a part size is outside of [5MiB, 5GiB]."""

    def __init__(self, part_size: int):
        self._part_size = part_size
        super().__init__(
            f"part size {part_size} is not supported; "
            f"allowed range is 5MiB to 5GiB",
        )

    @property
    def part_size(self) -> int:
        """Get rejected part size."""
        return self._part_size


class _SizeMismatchError(S3ClientException):
    """Common base of size accounting errors."""

    def __init__(
            self,
            message: str,
            total_read: int,
            total_size: int,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
    ):
        self._total_read = total_read
        self._total_size = total_size
        self._bucket_name = bucket_name
        self._object_name = object_name
        super().__init__(message)

    @property
    def total_read(self) -> int:
        """Get number of bytes actually accounted."""
        return self._total_read

    @property
    def total_size(self) -> int:
        """Get number of bytes expected."""
        return self._total_size

    @property
    def bucket_name(self) -> Optional[str]:
        """Get bucket name."""
        return self._bucket_name

    @property
    def object_name(self) -> Optional[str]:
        """Get object name."""
        return self._object_name


class UnexpectedEOFError(_SizeMismatchError):
    """
    Raised when the bytes acknowledged by the server for all parts do not add
    up to the size of the object.
    """

    def __init__(
            self,
            total_read: int,
            total_size: int,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
    ):
        super().__init__(
            f"unexpected EOF; uploaded {total_read} bytes of {total_size} "
            f"for object {object_name} in bucket {bucket_name}",
            total_read,
            total_size,
            bucket_name,
            object_name,
        )


class UnexpectedShortReadError(_SizeMismatchError):
    """Raised when the data source ends before the declared length."""

    def __init__(
            self,
            total_read: int,
            total_size: int,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
    ):
        super().__init__(
            f"data source has not enough data; read {total_read} bytes, "
            f"expected {total_size} bytes",
            total_read,
            total_size,
            bucket_name,
            object_name,
        )


class InvalidPartsError(S3ClientException):
    """
    Raised when the completion manifest does not hold exactly the planned
    number of parts.
    """

    def __init__(self, expected: int, actual: int):
        self._expected = expected
        self._actual = actual
        super().__init__(
            f"invalid parts; expected {expected} parts in completion "
            f"manifest, got {actual}",
        )

    @property
    def expected(self) -> int:
        """Get planned part count."""
        return self._expected

    @property
    def actual(self) -> int:
        """Get part count found in manifest."""
        return self._actual


class PartUploadError(S3ClientException):
    """
    Raised when uploading a part fails. The multipart upload is left open;
    pass ``upload_id`` back to ``put_object()`` to resume it.
    """

    def __init__(self, part_number: int, upload_id: str, cause: BaseException):
        self._part_number = part_number
        self._upload_id = upload_id
        self._cause = cause
        super().__init__(
            f"upload of part {part_number} failed for upload ID "
            f"{upload_id}; {cause}",
        )

    @property
    def part_number(self) -> int:
        """Get number of the failed part."""
        return self._part_number

    @property
    def upload_id(self) -> str:
        """Get upload ID of the open multipart upload."""
        return self._upload_id

    @property
    def cause(self) -> BaseException:
        """Get underlying error."""
        return self._cause


class UploadCancelledError(S3ClientException):
    """Raised when a multipart upload is stopped by its cancel event."""

    def __init__(self, upload_id: Optional[str]):
        self._upload_id = upload_id
        super().__init__(f"multipart upload {upload_id} cancelled")

    @property
    def upload_id(self) -> Optional[str]:
        """Get upload ID of the open multipart upload."""
        return self._upload_id
