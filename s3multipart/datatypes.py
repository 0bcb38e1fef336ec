# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage, (C)
# 2020 MinIO, Inc.
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
Multipart upload session, part geometry and responses of ListParts,
ListMultipartUploads and CompleteMultipartUpload APIs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Type, TypeVar, cast
from urllib.parse import unquote_plus
from xml.etree import ElementTree as ET

from urllib3._collections import HTTPHeaderDict
from urllib3.response import BaseHTTPResponse

from .time import from_iso8601utc
from .xml import find, findall, findtext


@dataclass(frozen=True)
class UploadSession:
    """In-progress multipart upload."""
    bucket_name: str
    object_name: str
    upload_id: str
    content_type: str = "application/octet-stream"
    resumed: bool = False


@dataclass(frozen=True)
class PartPlan:
    """
    Part geometry of an object. For unknown object size (``object_size`` is
    -1), ``part_count`` and ``last_part_size`` describe the biggest object
    the geometry can carry; the real count is known only at EOF.
    """
    object_size: int
    part_size: int
    part_count: int
    last_part_size: int

    @property
    def is_unknown_size(self) -> bool:
        """Check whether object size is unknown."""
        return self.object_size < 0

    def size_of(self, part_number: int) -> int:
        """Get expected size of given part number."""
        if part_number < 1 or part_number > self.part_count:
            raise ValueError(
                f"part number {part_number} is out of range "
                f"1..{self.part_count}",
            )
        if part_number == self.part_count:
            return self.last_part_size
        return self.part_size

    def offset_of(self, part_number: int) -> int:
        """Get offset of given part number in the object."""
        self.size_of(part_number)
        return (part_number - 1) * self.part_size

    @property
    def total_size(self) -> int:
        """Get number of bytes covered by all parts."""
        return (self.part_count - 1) * self.part_size + self.last_part_size


@dataclass(frozen=True)
class MissingPart:
    """Byte range of a part still to be uploaded."""
    offset: int
    size: int


MissingPartsInfo = Dict[int, MissingPart]

C = TypeVar("C", bound="Part")


@dataclass(frozen=True)
class Part:
    """Part information of a multipart upload."""
    part_number: int
    etag: str
    last_modified: Optional[datetime] = None
    size: Optional[int] = None

    @classmethod
    def fromxml(cls: Type[C], element: ET.Element) -> C:
        """Create new object with values from XML element."""
        part_number = int(cast(str, findtext(element, "PartNumber", True)))
        etag = cast(str, findtext(element, "ETag", True))
        size = findtext(element, "Size")
        return cls(
            part_number=part_number,
            etag=etag.replace('"', ""),
            last_modified=from_iso8601utc(findtext(element, "LastModified")),
            size=int(size) if size else None,
        )


def _owner(element: ET.Element, name: str) -> tuple[str | None, str | None]:
    """Get ID and display name of Owner or Initiator element."""
    tag = find(element, name)
    if tag is None:
        return None, None
    return findtext(tag, "ID"), findtext(tag, "DisplayName")


@dataclass(frozen=True)
class ListPartsResult:
    """ListParts API result."""

    bucket_name: Optional[str] = None
    object_name: Optional[str] = None
    upload_id: Optional[str] = None
    storage_class: Optional[str] = None
    part_number_marker: Optional[str] = None
    next_part_number_marker: Optional[str] = None
    max_parts: Optional[int] = None
    is_truncated: bool = False
    parts: list[Part] = field(default_factory=list)

    @classmethod
    def fromxml(cls, element: ET.Element) -> ListPartsResult:
        """Create new object with values from XML element."""
        max_parts = findtext(element, "MaxParts")
        return cls(
            bucket_name=findtext(element, "Bucket"),
            object_name=findtext(element, "Key"),
            upload_id=findtext(element, "UploadId"),
            storage_class=findtext(element, "StorageClass"),
            part_number_marker=findtext(element, "PartNumberMarker"),
            next_part_number_marker=findtext(element, "NextPartNumberMarker"),
            max_parts=int(max_parts) if max_parts else None,
            is_truncated=(
                (findtext(element, "IsTruncated") or "").lower() == "true"
            ),
            parts=[Part.fromxml(tag) for tag in findall(element, "Part")],
        )


@dataclass(frozen=True)
class Upload:
    """Upload information of a multipart upload."""

    object_name: str
    upload_id: Optional[str] = None
    initiator_id: Optional[str] = None
    initiator_name: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    storage_class: Optional[str] = None
    initiated_time: Optional[datetime] = None

    @classmethod
    def fromxml(
            cls,
            element: ET.Element,
            encoding_type: Optional[str] = None,
    ) -> Upload:
        """Create new object with values from XML element."""
        object_name = cast(str, findtext(element, "Key", True))
        initiator_id, initiator_name = _owner(element, "Initiator")
        owner_id, owner_name = _owner(element, "Owner")
        return cls(
            object_name=(
                unquote_plus(object_name) if encoding_type == "url"
                else object_name
            ),
            upload_id=findtext(element, "UploadId"),
            initiator_id=initiator_id,
            initiator_name=initiator_name,
            owner_id=owner_id,
            owner_name=owner_name,
            storage_class=findtext(element, "StorageClass"),
            initiated_time=from_iso8601utc(findtext(element, "Initiated")),
        )


@dataclass(frozen=True)
class ListMultipartUploadsResult:
    """ListMultipartUploads API result."""

    encoding_type: Optional[str] = None
    bucket_name: Optional[str] = None
    key_marker: Optional[str] = None
    upload_id_marker: Optional[str] = None
    next_key_marker: Optional[str] = None
    next_upload_id_marker: Optional[str] = None
    max_uploads: Optional[int] = None
    is_truncated: bool = False
    uploads: list[Upload] = field(default_factory=list)

    @classmethod
    def fromxml(cls, element: ET.Element) -> ListMultipartUploadsResult:
        """Create new object with values from XML element."""
        encoding_type = findtext(element, "EncodingType")

        def decode(value: Optional[str]) -> Optional[str]:
            if value is not None and encoding_type == "url":
                return unquote_plus(value)
            return value

        max_uploads = findtext(element, "MaxUploads")
        return cls(
            encoding_type=encoding_type,
            bucket_name=findtext(element, "Bucket"),
            key_marker=decode(findtext(element, "KeyMarker")),
            upload_id_marker=findtext(element, "UploadIdMarker"),
            next_key_marker=decode(findtext(element, "NextKeyMarker")),
            next_upload_id_marker=findtext(element, "NextUploadIdMarker"),
            max_uploads=int(max_uploads) if max_uploads else None,
            is_truncated=(
                (findtext(element, "IsTruncated") or "").lower() == "true"
            ),
            uploads=[
                Upload.fromxml(tag, encoding_type)
                for tag in findall(element, "Upload")
            ],
        )


@dataclass(frozen=True)
class CompleteMultipartUploadResult:
    """CompleteMultipartUpload API result."""

    http_headers: HTTPHeaderDict
    bucket_name: Optional[str] = None
    object_name: Optional[str] = None
    location: Optional[str] = None
    etag: Optional[str] = None
    version_id: Optional[str] = None

    def __init__(self, response: BaseHTTPResponse):
        object.__setattr__(self, "http_headers", response.headers)
        element = ET.fromstring(response.data.decode())
        object.__setattr__(self, "bucket_name", findtext(element, "Bucket"))
        object.__setattr__(self, "object_name", findtext(element, "Key"))
        object.__setattr__(self, "location", findtext(element, "Location"))
        etag = findtext(element, "ETag")
        object.__setattr__(
            self, "etag", etag.replace('"', "") if etag else None,
        )
        object.__setattr__(
            self,
            "version_id",
            response.headers.get("x-amz-version-id"),
        )
