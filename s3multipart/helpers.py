# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage, (C)
# 2015, 2016, 2017 MinIO, Inc.
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

"""Helper functions."""

from __future__ import annotations

import platform
import re
import threading
import urllib.parse
from typing import BinaryIO, Mapping, Optional

from typing_extensions import Protocol
from urllib3._collections import HTTPHeaderDict

from . import __title__, __version__
from .datatypes import PartPlan
from .error import EntityTooLargeError, InvalidPartSizeError

_DEFAULT_USER_AGENT = (
    f"s3multipart ({platform.system()}; {platform.machine()}) "
    f"{__title__}/{__version__}"
)

MAX_MULTIPART_COUNT = 10000  # 10000 parts
MAX_MULTIPART_OBJECT_SIZE = 5 * 1024 * 1024 * 1024 * 1024  # 5TiB
MAX_PART_SIZE = 5 * 1024 * 1024 * 1024  # 5GiB
MIN_PART_SIZE = 5 * 1024 * 1024  # 5MiB
# Default part sizes are multiples of this.
PART_SIZE_GRANULARITY = 128 * 1024 * 1024  # 128MiB
MAX_SINGLE_PUT_OBJECT_SIZE = 5 * 1024 * 1024 * 1024  # 5GiB
# Part size agreed by uploads created before the 10000 parts formula.
LEGACY_PART_SIZE = MAX_MULTIPART_OBJECT_SIZE // (MAX_MULTIPART_COUNT - 1)

_BUCKET_NAME_REGEX = re.compile(r'^[a-z0-9][a-z0-9_\.\-\:]{1,61}[a-z0-9]$',
                                re.IGNORECASE)
_IPV4_REGEX = re.compile(
    r'^((25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])\.){3}'
    r'(25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])$')
_REGION_REGEX = re.compile(r'^((?!_)(?!-)[a-z_\d-]{1,63}(?<!-)(?<!_))$',
                           re.IGNORECASE)
_AWS_S3_HOST_REGEX = re.compile(
    r'^s3([.-](?P<region>(?!external-1)[a-z]{2}(-gov)?-[a-z]+-\d))?'
    r'\.amazonaws\.com(\.cn)?$',
    re.IGNORECASE,
)


def quote(
        resource: str,
        safe: str = "/",
        encoding: str | None = None,
        errors: str | None = None,
) -> str:
    """
    Wrapper to urllib.parse.quote() replacing back to '~' for older python
    versions.
    """
    return urllib.parse.quote(
        resource,
        safe=safe,
        encoding=encoding,
        errors=errors,
    ).replace("%7E", "~")


def queryencode(query: str) -> str:
    """Encode query parameter value."""
    return quote(query, safe="")


def headers_to_strings(
        headers: Mapping[str, str | list[str] | tuple[str]],
        titled_key: bool = False,
) -> str:
    """Convert HTTP headers to multi-line string."""
    values = []
    for key, value in headers.items():
        key = key.title() if titled_key else key
        for item in value if isinstance(value, (list, tuple)) else [value]:
            item = re.sub(
                r"Credential=([^/]+)",
                "Credential=*REDACTED*",
                re.sub(r"Signature=([0-9a-f]+)", "Signature=*REDACTED*", item),
            ) if titled_key else item
            values.append(f"{key}: {item}")
    return "\n".join(values)


def _ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division."""
    return -(-numerator // denominator)


def _validate_sizes(object_size: int, part_size: int):
    """Validate object and part size."""
    if part_size and not MIN_PART_SIZE <= part_size <= MAX_PART_SIZE:
        raise InvalidPartSizeError(part_size)

    if object_size > MAX_MULTIPART_OBJECT_SIZE:
        raise EntityTooLargeError(
            f"object size {object_size} is not supported; "
            f"maximum allowed 5TiB",
            object_size,
        )


def optimal_part_info(
        object_size: int,
        part_size: int = 0,
        legacy: bool = False,
) -> PartPlan:
    """
    Compute part geometry of an object.

    :param object_size: Size of the object; -1 for unknown size.
    :param part_size: Part size to use; 0 computes the smallest multiple of
        128MiB which fits the object in 10000 parts.
    :param legacy: When part size is 0, use the older
        ``5TiB / 9999`` default agreed by earlier multipart uploads.
    :return: :class:`PartPlan <PartPlan>` object.

    For unknown object size, the plan describes the biggest object the part
    size can carry within 10000 parts and 5TiB.
    """
    _validate_sizes(object_size, part_size)

    size = object_size
    if size < 0:
        size = MAX_MULTIPART_OBJECT_SIZE
        if part_size:
            size = min(size, part_size * MAX_MULTIPART_COUNT)

    if not part_size:
        if legacy:
            part_size = LEGACY_PART_SIZE
        else:
            part_size = max(
                _ceil_div(
                    _ceil_div(size, MAX_MULTIPART_COUNT),
                    PART_SIZE_GRANULARITY,
                ),
                1,
            ) * PART_SIZE_GRANULARITY

    if size == 0:
        return PartPlan(object_size, part_size, 1, 0)

    part_count = _ceil_div(size, part_size)
    if part_count > MAX_MULTIPART_COUNT:
        raise EntityTooLargeError(
            f"object size {object_size} and part size {part_size} "
            f"make more than {MAX_MULTIPART_COUNT} parts for upload",
            object_size,
        )
    return PartPlan(
        object_size=object_size,
        part_size=part_size,
        part_count=part_count,
        last_part_size=size - (part_count - 1) * part_size,
    )


def parts_required(size: int, part_size: int = 0) -> int:
    """
    Get number of parts of part_size covering size bytes; part_size defaults
    to 5GiB.
    """
    if size < 0:
        raise ValueError(f"size {size} must not be negative")
    return _ceil_div(size, part_size or MAX_PART_SIZE)


def part_ranges(
        size: int,
        part_size: int = 0,
        start: int = 0,
) -> tuple[list[int], list[int]]:
    """
    Split size bytes into contiguous inclusive ranges of part_size bytes
    with the remainder in the last range.
    """
    part_size = part_size or MAX_PART_SIZE
    starts = []
    ends = []
    for index in range(parts_required(size, part_size)):
        offset = index * part_size
        starts.append(start + offset)
        ends.append(start + min(offset + part_size, size) - 1)
    return starts, ends


def calculate_even_splits(
        size: int,
        part_size: int = 0,
        start: int = 0,
) -> tuple[list[int], list[int]]:
    """
    Split size bytes into parts_required(size, part_size) contiguous
    inclusive ranges of nearly equal length; the first ``size % count``
    ranges are one byte longer.
    """
    count = parts_required(size, part_size)
    if not count:
        return [], []

    length, remainder = divmod(size, count)
    starts = []
    ends = []
    offset = start
    for index in range(count):
        starts.append(offset)
        offset += length + (1 if index < remainder else 0)
        ends.append(offset - 1)
    return starts, ends


class ProgressType(Protocol):
    """typing stub for Put object progress."""

    def set_meta(self, object_name: str, total_length: int):
        """Set process meta information."""

    def update(self, length: int):
        """Set current progress length."""


def read_part_data(
        stream: BinaryIO,
        size: int,
        part_data: bytes = b"",
        progress: ProgressType | None = None,
) -> bytes:
    """Read part data of given size from stream."""
    size -= len(part_data)
    while size:
        data = stream.read(size)
        if not data:
            break  # EOF reached
        if not isinstance(data, bytes):
            raise ValueError("read() must return 'bytes' object")
        part_data += data
        size -= len(data)
        if progress:
            progress.update(len(data))
    return part_data


def check_bucket_name(bucket_name: str):
    """Check whether bucket name is valid."""
    if not _BUCKET_NAME_REGEX.match(bucket_name):
        raise ValueError(f'invalid bucket name {bucket_name}')

    if _IPV4_REGEX.match(bucket_name):
        raise ValueError(f'bucket name {bucket_name} must not be formatted '
                         'as an IP address')

    unallowed_successive_chars = ['..', '.-', '-.']
    if any(x in bucket_name for x in unallowed_successive_chars):
        raise ValueError(f'bucket name {bucket_name} contains invalid '
                         'successive characters')


def check_object_name(object_name: str):
    """Check whether object name is valid."""
    if not isinstance(object_name, str):
        raise TypeError("object name must be str type")
    if not object_name:
        raise ValueError("object name cannot be empty")
    if len(object_name.encode()) > 1024:
        raise ValueError(
            f"object name {object_name} is longer than 1024 bytes",
        )


def normalize_headers(metadata: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Normalize headers by prefixing 'X-Amz-Meta-' for user metadata."""
    headers = {}
    for key, value in (metadata or {}).items():
        key = str(key)
        lower_key = key.lower()
        if not (
                lower_key.startswith("x-amz-") or
                lower_key in [
                    "cache-control",
                    "content-encoding",
                    "content-type",
                    "content-disposition",
                    "content-language",
                ]
        ):
            key = "X-Amz-Meta-" + key
        value = str(value)
        try:
            value.encode("us-ascii")
        except UnicodeEncodeError as exc:
            raise ValueError(
                f"unsupported metadata value {value}; "
                f"only US-ASCII encoded characters are supported"
            ) from exc
        headers[key] = value
    return headers


def url_replace(
        url: urllib.parse.SplitResult,
        scheme: str | None = None,
        netloc: str | None = None,
        path: str | None = None,
        query: str | None = None,
) -> urllib.parse.SplitResult:
    """Return new URL with replaced properties in given URL."""
    return urllib.parse.SplitResult(
        scheme if scheme is not None else url.scheme,
        netloc if netloc is not None else url.netloc,
        path if path is not None else url.path,
        query if query is not None else url.query,
        url.fragment,
    )


def _parse_url(endpoint: str) -> urllib.parse.SplitResult:
    """Parse url string."""

    url = urllib.parse.urlsplit(endpoint)
    host = url.hostname

    if url.scheme.lower() not in ["http", "https"]:
        raise ValueError("scheme in endpoint must be http or https")

    url = url_replace(url, scheme=url.scheme.lower())

    if url.path and url.path != "/":
        raise ValueError("path in endpoint is not allowed")

    url = url_replace(url, path="")

    if url.query:
        raise ValueError("query in endpoint is not allowed")

    if url.fragment:
        raise ValueError("fragment in endpoint is not allowed")

    try:
        url.port
    except ValueError as exc:
        raise ValueError("invalid port") from exc

    if url.username or url.password:
        raise ValueError("credentials in endpoint are not allowed")

    if (
            (url.scheme == "http" and url.port == 80) or
            (url.scheme == "https" and url.port == 443)
    ):
        url = url_replace(url, netloc=host)

    return url


class BaseURL:
    """Base URL of S3 endpoint."""

    def __init__(self, endpoint: str, region: str | None):
        url = _parse_url(endpoint)

        if region and not _REGION_REGEX.match(region):
            raise ValueError(f"invalid region {region}")

        match = _AWS_S3_HOST_REGEX.match(url.hostname or "")
        self._url = url
        self._is_aws_host = match is not None
        self._virtual_style_flag = self._is_aws_host
        self._region = region or (match.group("region") if match else None)

    @property
    def region(self) -> str | None:
        """Get region."""
        return self._region

    @property
    def is_https(self) -> bool:
        """Check if scheme is HTTPS."""
        return self._url.scheme == "https"

    @property
    def host(self) -> str:
        """Get hostname."""
        return self._url.netloc

    @property
    def is_aws_host(self) -> bool:
        """Check if URL points to AWS host."""
        return self._is_aws_host

    @property
    def virtual_style_flag(self) -> bool:
        """Check to use virtual style or not."""
        return self._virtual_style_flag

    @virtual_style_flag.setter
    def virtual_style_flag(self, flag: bool):
        """Set to use virtual style or not."""
        self._virtual_style_flag = flag

    def build(
            self,
            bucket_name: str | None = None,
            object_name: str | None = None,
            query_params: Mapping[str, str] | None = None,
    ) -> urllib.parse.SplitResult:
        """Build URL for given information."""
        if not bucket_name and object_name:
            raise ValueError(
                f"empty bucket name for object name {object_name}",
            )

        query = "&".join(
            f"{queryencode(key)}={queryencode(value)}"
            for key, value in sorted((query_params or {}).items())
        )
        url = url_replace(self._url, path="/", query=query)
        if not bucket_name:
            return url

        netloc = url.netloc
        enforce_path_style = (
            # GetBucketLocation API requires path style in Amazon AWS S3.
            "location" in (query_params or {}) or

            # Use path style for bucket name containing '.' which causes
            # SSL certificate validation error.
            ("." in bucket_name and self.is_https)
        )
        if enforce_path_style or not self._virtual_style_flag:
            path = f"/{bucket_name}"
        else:
            netloc = f"{bucket_name}.{netloc}"
            path = "/"
        if object_name:
            path += ("" if path.endswith("/") else "/") + quote(object_name)

        return url_replace(url, netloc=netloc, path=path)


class RegionMap:
    """Per client cache of bucket regions."""

    def __init__(self):
        self._lock = threading.Lock()
        self._map: dict[str, str] = {}

    def get(self, bucket_name: str) -> str | None:
        """Get cached region of bucket."""
        with self._lock:
            return self._map.get(bucket_name)

    def set(self, bucket_name: str, region: str):
        """Cache region of bucket."""
        with self._lock:
            self._map[bucket_name] = region

    def remove(self, bucket_name: str):
        """Drop cached region of bucket."""
        with self._lock:
            self._map.pop(bucket_name, None)


class ObjectWriteResult:
    """Result class of any APIs doing object creation."""

    def __init__(
            self,
            bucket_name: str,
            object_name: str,
            version_id: str | None,
            etag: str | None,
            http_headers: HTTPHeaderDict | None,
            location: str | None = None,
            upload_id: str | None = None,
            size: int | None = None,
    ):
        self._bucket_name = bucket_name
        self._object_name = object_name
        self._version_id = version_id
        self._etag = etag
        self._http_headers = http_headers
        self._location = location
        self._upload_id = upload_id
        self._size = size

    @property
    def bucket_name(self) -> str:
        """Get bucket name."""
        return self._bucket_name

    @property
    def object_name(self) -> str:
        """Get object name."""
        return self._object_name

    @property
    def version_id(self) -> str | None:
        """Get version ID."""
        return self._version_id

    @property
    def etag(self) -> str | None:
        """Get etag."""
        return self._etag

    @property
    def http_headers(self) -> HTTPHeaderDict | None:
        """Get HTTP headers."""
        return self._http_headers

    @property
    def location(self) -> str | None:
        """Get location."""
        return self._location

    @property
    def upload_id(self) -> str | None:
        """Get upload ID of completed multipart upload."""
        return self._upload_id

    @property
    def size(self) -> int | None:
        """Get number of bytes written."""
        return self._size
