# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage,
# (C) 2015-2020 MinIO, Inc.
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
s3multipart.signer
~~~~~~~~~~~~~~~~~~

AWS Signature Version 4 header signing of S3 requests.

:copyright: (c) 2015 by MinIO, Inc.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import annotations

import hashlib
import hmac
import re
from datetime import datetime
from functools import lru_cache
from typing import Mapping
from urllib.parse import SplitResult

from . import time
from .checksum import sha256_hash
from .credentials import Credentials

SIGN_V4_ALGORITHM = "AWS4-HMAC-SHA256"
_MULTI_SPACE_REGEX = re.compile(r"( +)")
_UNSIGNED_HEADERS = ("authorization", "user-agent")

HeaderType = Mapping[str, "str | list[str] | tuple[str]"]


def _hmac(key: bytes, data: str) -> bytes:
    """Return HMAC-SHA256 digest of given key and data."""
    return hmac.new(key, data.encode(), hashlib.sha256).digest()


def _scope(date: datetime, region: str, service_name: str) -> str:
    """Get credential scope string."""
    return f"{time.to_signer_date(date)}/{region}/{service_name}/aws4_request"


def _canonical_headers(headers: HeaderType) -> tuple[str, str]:
    """Get canonical headers and signed headers."""
    values = {}
    for key, value in headers.items():
        key = key.lower()
        if key in _UNSIGNED_HEADERS:
            continue
        items = value if isinstance(value, (list, tuple)) else [value]
        values[key] = ",".join(
            _MULTI_SPACE_REGEX.sub(" ", str(item)).strip() for item in items
        )

    keys = sorted(values)
    return (
        "\n".join(f"{key}:{values[key]}" for key in keys),
        ";".join(keys),
    )


def _canonical_query_string(query: str) -> str:
    """Get canonical query string."""
    if not query:
        return ""
    pairs = sorted(param.partition("=")[::2] for param in query.split("&"))
    return "&".join(f"{key}={value}" for key, value in pairs)


def canonical_request(
        method: str,
        url: SplitResult,
        headers: HeaderType,
        content_sha256: str,
) -> tuple[str, str]:
    """Get canonical request and its signed headers."""
    canonical_headers, signed_headers = _canonical_headers(headers)
    request = "\n".join([
        method,
        url.path or "/",
        _canonical_query_string(url.query),
        canonical_headers,
        "",
        signed_headers,
        content_sha256,
    ])
    return request, signed_headers


@lru_cache(maxsize=64)
def _signing_key(
        secret_key: str,
        date: str,
        region: str,
        service_name: str,
) -> bytes:
    """Get signing key, derived once per day, region and service."""
    key = _hmac(("AWS4" + secret_key).encode(), date)
    for data in (region, service_name, "aws4_request"):
        key = _hmac(key, data)
    return key


def sign_v4_s3(
        method: str,
        url: SplitResult,
        region: str,
        headers: dict,
        credentials: Credentials,
        content_sha256: str,
        date: datetime,
) -> dict:
    """Add Signature V4 Authorization header to headers of S3 request."""
    scope = _scope(date, region, "s3")
    request, signed_headers = canonical_request(
        method, url, headers, content_sha256,
    )
    string_to_sign = "\n".join([
        SIGN_V4_ALGORITHM,
        time.to_amz_date(date),
        scope,
        sha256_hash(request),
    ])
    signing_key = _signing_key(
        credentials.secret_key, time.to_signer_date(date), region, "s3",
    )
    signature = hmac.new(
        signing_key, string_to_sign.encode(), hashlib.sha256,
    ).hexdigest()
    headers["Authorization"] = (
        f"{SIGN_V4_ALGORITHM} Credential={credentials.access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )
    return headers
