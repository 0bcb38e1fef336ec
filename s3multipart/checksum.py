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

"""Checksum functions for request payloads and uploaded parts."""

from __future__ import annotations

import base64
import hashlib
from abc import ABC, abstractmethod
from typing import Iterable, Optional

# MD5 hash of zero length byte array.
ZERO_MD5_HASH = "1B2M2Y8AsgTpgAmY7PhCfg=="
# SHA-256 hash of zero length byte array.
ZERO_SHA256_HASH = (
    "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
)
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"


def base64_string(data: bytes) -> str:
    """Encodes the specified bytes to Base64 string."""
    return base64.b64encode(data).decode("ascii")


def hex_string(data: bytes) -> str:
    """Encodes the specified bytes to Base16 (hex) string."""
    return data.hex()


def sha256_hash(data: Optional[str | bytes]) -> str:
    """Compute SHA-256 of data and return hash as hex encoded value."""
    data = data or b""
    return hashlib.sha256(
        data.encode() if isinstance(data, str) else data,
    ).hexdigest()


class Hasher(ABC):
    """Checksum hasher interface."""

    @abstractmethod
    def update(self, data: bytes) -> None:
        """Update the hash with data."""

    @abstractmethod
    def sum(self) -> bytes:
        """Return the final digest."""


class HashlibHasher(Hasher):
    """Generic wrapper for hashlib algorithms."""

    def __init__(self, name: str, **kwargs):
        self._hasher = hashlib.new(name, **kwargs)

    def update(self, data: bytes) -> None:
        self._hasher.update(data)

    def sum(self) -> bytes:
        return self._hasher.digest()

    @classmethod
    def hash(cls, data: bytes) -> bytes:
        """Gets sum of given data."""
        hasher = cls()
        hasher.update(data)
        return hasher.sum()


class SHA256(HashlibHasher):
    """SHA256 checksum."""

    def __init__(self):
        super().__init__("sha256")


class MD5(HashlibHasher):
    """MD5 checksum."""

    def __init__(self):
        # indicate md5 hashing algorithm is not used in a security context.
        # Refer https://bugs.python.org/issue9216 for more information.
        super().__init__("md5", usedforsecurity=False)


class PartHashers:
    """
    Fan-out of the hashers a part needs; MD5 always, SHA-256 only when the
    payload is signed.
    """

    def __init__(self, with_sha256: bool = False):
        self._md5 = MD5()
        self._sha256 = SHA256() if with_sha256 else None

    def update(self, data: bytes):
        """Feed data to every hasher."""
        self._md5.update(data)
        if self._sha256:
            self._sha256.update(data)

    def update_all(self, chunks: Iterable[bytes]) -> int:
        """Feed all chunks and return number of bytes hashed."""
        length = 0
        for chunk in chunks:
            self.update(chunk)
            length += len(chunk)
        return length

    @property
    def md5sum(self) -> bytes:
        """Get MD5 digest."""
        return self._md5.sum()

    @property
    def sha256sum(self) -> Optional[bytes]:
        """Get SHA-256 digest if computed."""
        return self._sha256.sum() if self._sha256 else None
