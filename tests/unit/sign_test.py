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
import hmac
from datetime import datetime, timezone
from unittest import TestCase
from urllib.parse import urlsplit

from s3multipart.checksum import ZERO_SHA256_HASH, sha256_hash
from s3multipart.credentials import Credentials
from s3multipart.signer import _signing_key, canonical_request, sign_v4_s3

dt = datetime(2015, 6, 20, 1, 2, 3, 0, timezone.utc)


class CanonicalRequestTest(TestCase):
    def test_simple_request(self):
        url = urlsplit("http://localhost:9000/hello")
        request, signed_headers = canonical_request(
            "PUT", url,
            {
                "x-amz-date": "dateString",
                "x-amz-content-sha256": ZERO_SHA256_HASH,
            },
            ZERO_SHA256_HASH,
        )
        self.assertEqual(signed_headers, "x-amz-content-sha256;x-amz-date")
        self.assertEqual(
            request,
            "\n".join([
                "PUT", "/hello", "",
                "x-amz-content-sha256:" + ZERO_SHA256_HASH,
                "x-amz-date:dateString",
                "", signed_headers, ZERO_SHA256_HASH,
            ]),
        )

    def test_request_with_query(self):
        url = urlsplit("http://localhost:9000/hello?c=d&e=f&a=b&uploads=")
        request, _ = canonical_request(
            "POST", url, {"x-amz-date": "dateString"}, ZERO_SHA256_HASH,
        )
        self.assertEqual(request.split("\n")[2], "a=b&c=d&e=f&uploads=")

    def test_unsigned_headers_and_spaces(self):
        url = urlsplit("http://localhost:9000/hello")
        request, signed_headers = canonical_request(
            "GET", url,
            {
                "Authorization": "AWS4-HMAC-SHA256 old",
                "User-Agent": "agent",
                "X-Amz-Meta-Note": "  two   spaces ",
            },
            ZERO_SHA256_HASH,
        )
        self.assertEqual(signed_headers, "x-amz-meta-note")
        self.assertIn("x-amz-meta-note:two spaces", request)


class SigningKeyTest(TestCase):
    def test_generate_signing_key(self):
        key = hmac.new(b"AWS4S3CR3T", b"20150620", hashlib.sha256).digest()
        for data in (b"region", b"s3", b"aws4_request"):
            key = hmac.new(key, data, hashlib.sha256).digest()
        self.assertEqual(_signing_key("S3CR3T", "20150620", "region", "s3"),
                         key)


class SignV4Test(TestCase):
    def test_signv4(self):
        headers = {
            "Host": "localhost:9000",
            "x-amz-content-sha256": ZERO_SHA256_HASH,
            "x-amz-date": "20150620T010203Z",
        }
        url = urlsplit(
            "http://localhost:9000/testbucket/~testobject"
            "?partID=1&uploadID=~abcd",
        )
        headers = sign_v4_s3(
            "PUT", url, "us-east-1", headers,
            Credentials("minio", "minio123"), ZERO_SHA256_HASH, dt,
        )
        self.assertEqual(
            headers["Authorization"],
            "AWS4-HMAC-SHA256 Credential="
            "minio/20150620/us-east-1/s3/aws4_request, "
            "SignedHeaders=host;x-amz-content-sha256;x-amz-date, "
            "Signature="
            "a2f4546f647981732bd90dfa5a7599c44dca92f44bea48ecc7565df06032c25b",
        )

    def test_string_to_sign_uses_request_hash(self):
        headers = {"x-amz-date": "20150620T010203Z"}
        url = urlsplit("http://localhost:9000/bucket")
        request, _ = canonical_request("GET", url, headers, ZERO_SHA256_HASH)
        string_to_sign = "\n".join([
            "AWS4-HMAC-SHA256", "20150620T010203Z",
            "20150620/us-east-1/s3/aws4_request", sha256_hash(request),
        ])
        signature = hmac.new(
            _signing_key("secret", "20150620", "us-east-1", "s3"),
            string_to_sign.encode(), hashlib.sha256,
        ).hexdigest()
        signed = sign_v4_s3(
            "GET", url, "us-east-1", dict(headers),
            Credentials("access", "secret"), ZERO_SHA256_HASH, dt,
        )
        self.assertTrue(signed["Authorization"].endswith(
            "Signature=" + signature,
        ))
