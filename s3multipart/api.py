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

# pylint: disable=too-many-arguments
# pylint: disable=too-many-positional-arguments
# pylint: disable=too-many-locals

"""
Simple Storage Service (aka S3) client uploading objects with resumable,
concurrent multipart uploads.
"""

from __future__ import annotations

import os
import threading
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Iterator, Mapping, Optional, TextIO, Union, cast
from urllib.parse import urlunsplit
from xml.etree import ElementTree as ET

import certifi
import urllib3
from urllib3 import Retry
from urllib3.response import BaseHTTPResponse
from urllib3.util import Timeout

from . import time
from .checksum import (MD5, SHA256, UNSIGNED_PAYLOAD, ZERO_MD5_HASH,
                       ZERO_SHA256_HASH, PartHashers, base64_string,
                       hex_string)
from .credentials import Provider, StaticProvider
from .datatypes import (CompleteMultipartUploadResult,
                        ListMultipartUploadsResult, ListPartsResult, Part,
                        Upload)
from .error import (InvalidResponseError, S3Error, ServerError,
                    UnexpectedShortReadError)
from .helpers import (_DEFAULT_USER_AGENT, BaseURL, ObjectWriteResult,
                      ProgressType, RegionMap, check_bucket_name,
                      check_object_name, headers_to_strings,
                      normalize_headers, optimal_part_info, read_part_data)
from .io import ReaderAt, SectionReader, is_random_access
from .multipart import MultipartUploader
from .signer import sign_v4_s3
from .xml import Element, SubElement, findtext, getbytes

Body = Union[bytes, BinaryIO]


class Client:
    """
    Simple Storage Service (aka S3) client to upload objects with
    resumable multipart uploads.
    """
    _region_map: RegionMap
    _base_url: BaseURL
    _user_agent: str
    _trace_stream: Optional[TextIO]
    _provider: Optional[Provider]
    _http: urllib3.PoolManager

    def __init__(
            self,
            endpoint: str,
            access_key: Optional[str] = None,
            secret_key: Optional[str] = None,
            session_token: Optional[str] = None,
            secure: bool = True,
            region: Optional[str] = None,
            http_client: Optional[urllib3.PoolManager] = None,
            credentials: Optional[Provider] = None,
            cert_check: bool = True,
    ):
        """
        Initializes a new client object.

        :param endpoint: Hostname of a S3 service.
        :param access_key: Access key (aka user ID) of your account in S3
            service.
        :param secret_key: Secret Key (aka password) of your account in S3
            service.
        :param session_token: Session token of your account in S3 service.
        :param secure: Flag to indicate to use secure (TLS) connection to S3
            service or not.
        :param region: Region name of buckets in S3 service.
        :param http_client: Customized HTTP client.
        :param credentials: Credentials provider of your account in S3
            service.
        :param cert_check: Flag to check on server certificate for HTTPS
            connection.

        Example::
            # Create client with access and secret key.
            client = Client("s3.amazonaws.com", "ACCESS-KEY", "SECRET-KEY")

            # Create client with credentials from environment.
            client = Client("play.min.io", credentials=EnvAWSProvider())
        """
        # Validate http client has correct base class.
        if http_client and not isinstance(http_client, urllib3.PoolManager):
            raise TypeError(
                "HTTP client should be urllib3.PoolManager like object, "
                f"got {type(http_client).__name__}",
            )

        self._region_map = RegionMap()
        self._base_url = BaseURL(
            ("https://" if secure else "http://") + endpoint,
            region,
        )
        self._user_agent = _DEFAULT_USER_AGENT
        self._trace_stream = None
        if access_key:
            if secret_key is None:
                raise ValueError("secret key must be provided with access key")
            credentials = StaticProvider(access_key, secret_key, session_token)
        self._provider = credentials

        # Load CA certificates from SSL_CERT_FILE file if set
        timeout = timedelta(minutes=5).seconds
        self._http = http_client or urllib3.PoolManager(
            timeout=Timeout(connect=timeout, read=timeout),
            maxsize=10,
            cert_reqs='CERT_REQUIRED' if cert_check else 'CERT_NONE',
            ca_certs=os.environ.get('SSL_CERT_FILE') or certifi.where(),
            retries=Retry(
                total=5,
                backoff_factor=0.2,
                status_forcelist=[500, 502, 503, 504]
            )
        )

    def __del__(self):
        if hasattr(self, "_http"):  # Only required for unit test run
            self._http.clear()

    def _handle_redirect_response(
            self,
            method: str,
            response: BaseHTTPResponse,
            bucket_name: Optional[str] = None,
            retry: bool = False,
    ) -> tuple[Optional[str], Optional[str]]:
        """
        Handle redirect response indicates whether retry HEAD request
        on failure.
        """
        code, message = {
            301: ("PermanentRedirect", "Moved Permanently"),
            307: ("Redirect", "Temporary redirect"),
            400: ("BadRequest", "Bad request"),
        }.get(response.status, (None, None))
        region = response.headers.get("x-amz-bucket-region")
        if message and region:
            message += "; use region " + region

        if (
                retry and region and method == "HEAD" and bucket_name and
                self._region_map.get(bucket_name)
        ):
            code, message = ("RetryHead", None)

        return code, message

    def _trace_request(self, method, url, headers, body, no_body_trace):
        stream = cast(TextIO, self._trace_stream)
        stream.write("---------START-HTTP---------\n")
        query = ("?" + url.query) if url.query else ""
        stream.write(f"{method} {url.path}{query} HTTP/1.1\n")
        stream.write(headers_to_strings(headers, titled_key=True))
        stream.write("\n")
        if not no_body_trace and isinstance(body, bytes):
            stream.write("\n")
            stream.write(body.decode())
            stream.write("\n")
        stream.write("\n")

    def _url_open(
            self,
            method: str,
            region: str,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            body: Optional[Body] = None,
            headers: Optional[Mapping[str, str]] = None,
            query_params: Optional[Mapping[str, str]] = None,
            preload_content: bool = True,
            no_body_trace: bool = False,
            content_length: Optional[int] = None,
    ) -> BaseHTTPResponse:
        """Execute HTTP request."""
        url = self._base_url.build(
            bucket_name=bucket_name,
            object_name=object_name,
            query_params=query_params,
        )

        headers = dict(headers or {})
        headers["Host"] = url.netloc
        headers["User-Agent"] = self._user_agent
        content_sha256 = headers.get("x-amz-content-sha256")
        content_md5 = headers.get("Content-MD5")
        if method in ["PUT", "POST"]:
            if content_length is None:
                content_length = len(body) if isinstance(body, bytes) else 0
            headers["Content-Length"] = str(content_length)
            if not headers.get("Content-Type"):
                headers["Content-Type"] = "application/octet-stream"
        if body is None:
            content_sha256 = content_sha256 or ZERO_SHA256_HASH
            content_md5 = content_md5 or ZERO_MD5_HASH
        elif isinstance(body, bytes):
            if not content_sha256:
                content_sha256 = (
                    UNSIGNED_PAYLOAD if self._base_url.is_https
                    else hex_string(SHA256.hash(body))
                )
            if not content_md5 and content_sha256 == UNSIGNED_PAYLOAD:
                content_md5 = base64_string(MD5.hash(body))
        else:
            # Streamed bodies are hashed by the caller.
            content_sha256 = content_sha256 or UNSIGNED_PAYLOAD
        headers["x-amz-content-sha256"] = cast(str, content_sha256)
        if content_md5:
            headers["Content-MD5"] = content_md5
        date = time.utcnow()
        headers["x-amz-date"] = time.to_amz_date(date)

        if self._provider is not None:
            creds = self._provider.retrieve()
            if creds.session_token:
                headers["X-Amz-Security-Token"] = creds.session_token
            headers = sign_v4_s3(
                method=method,
                url=url,
                region=region,
                headers=headers,
                credentials=creds,
                content_sha256=cast(str, content_sha256),
                date=date,
            )

        if self._trace_stream:
            self._trace_request(method, url, headers, body, no_body_trace)

        response = self._http.urlopen(
            method,
            urlunsplit(url),
            body=body,
            headers=headers,
            preload_content=preload_content,
        )

        if self._trace_stream:
            self._trace_stream.write(f"HTTP/1.1 {response.status}\n")
            self._trace_stream.write(
                headers_to_strings(response.headers),
            )
            self._trace_stream.write("\n")

        if response.status in [200, 204, 206]:
            if self._trace_stream:
                if preload_content and response.data:
                    self._trace_stream.write("\n")
                    self._trace_stream.write(response.data.decode())
                    self._trace_stream.write("\n")
                self._trace_stream.write("----------END-HTTP----------\n")
            return response

        response.read(cache_content=True)
        if not preload_content:
            response.release_conn()

        if self._trace_stream and method != "HEAD" and response.data:
            self._trace_stream.write(response.data.decode())
            self._trace_stream.write("\n")

        if (
                method != "HEAD" and
                "application/xml" not in response.headers.get(
                    "content-type", "",
                ).split(";")
        ):
            if self._trace_stream:
                self._trace_stream.write("----------END-HTTP----------\n")
            raise InvalidResponseError(
                response.status,
                cast(str, response.headers.get("content-type")),
                response.data.decode() if response.data else None,
            )

        if not response.data and method != "HEAD":
            if self._trace_stream:
                self._trace_stream.write("----------END-HTTP----------\n")
            raise InvalidResponseError(
                response.status,
                response.headers.get("content-type"),
                None,
            )

        response_error = S3Error.fromxml(response) if response.data else None

        if self._trace_stream:
            self._trace_stream.write("----------END-HTTP----------\n")

        error_map = {
            301: lambda: self._handle_redirect_response(
                method, response, bucket_name, True,
            ),
            307: lambda: self._handle_redirect_response(
                method, response, bucket_name, True,
            ),
            400: lambda: self._handle_redirect_response(
                method, response, bucket_name, True,
            ),
            403: lambda: ("AccessDenied", "Access denied"),
            404: lambda: (
                ("NoSuchUpload", "Multipart upload does not exist")
                if "uploadId" in (query_params or {})
                else ("NoSuchKey", "Object does not exist")
                if object_name
                else ("NoSuchBucket", "Bucket does not exist")
                if bucket_name
                else ("ResourceNotFound", "Request resource not found")
            ),
            405: lambda: (
                "MethodNotAllowed",
                "The specified method is not allowed against this resource",
            ),
            501: lambda: (
                "MethodNotAllowed",
                "The specified method is not allowed against this resource",
            ),
        }

        if not response_error:
            func = error_map.get(response.status)
            code, message = func() if func else (None, None)
            if not code:
                raise ServerError(
                    f"server failed with HTTP status code {response.status}",
                    response.status,
                )
            response_error = S3Error(
                response=response,
                code=code,
                message=message,
                resource=url.path,
                request_id=response.headers.get("x-amz-request-id"),
                host_id=response.headers.get("x-amz-id-2"),
                bucket_name=bucket_name,
                object_name=object_name,
            )

        if response_error.code in ["NoSuchBucket", "RetryHead"]:
            if bucket_name is not None:
                self._region_map.remove(bucket_name)

        raise response_error

    def _execute(
            self,
            method: str,
            bucket_name: Optional[str] = None,
            object_name: Optional[str] = None,
            body: Optional[Body] = None,
            headers: Optional[Mapping[str, str]] = None,
            query_params: Optional[Mapping[str, str]] = None,
            preload_content: bool = True,
            no_body_trace: bool = False,
            content_length: Optional[int] = None,
    ) -> BaseHTTPResponse:
        """Execute HTTP request."""
        region = self._get_region(bucket_name)

        def url_open():
            return self._url_open(
                method=method,
                region=region,
                bucket_name=bucket_name,
                object_name=object_name,
                body=body,
                headers=headers,
                query_params=query_params,
                preload_content=preload_content,
                no_body_trace=no_body_trace,
                content_length=content_length,
            )

        try:
            return url_open()
        except S3Error as exc:
            if exc.code != "RetryHead":
                raise

        # Retry only once on RetryHead error.
        try:
            return url_open()
        except S3Error as exc:
            if exc.code != "RetryHead":
                raise

            code, message = self._handle_redirect_response(
                method, cast(BaseHTTPResponse, exc.response), bucket_name,
            )
            raise exc.copy(cast(str, code), cast(str, message))

    def _get_region(self, bucket_name: Optional[str] = None) -> str:
        """
        Return region of given bucket either from region cache or set in
        constructor.
        """
        if self._base_url.region is not None:
            return self._base_url.region

        if not bucket_name or not self._provider:
            return "us-east-1"

        region = self._region_map.get(bucket_name)
        if region:
            return region

        # Execute GetBucketLocation REST API to get region of the bucket.
        response = self._url_open(
            method="GET",
            region="us-east-1",
            bucket_name=bucket_name,
            query_params={"location": ""},
        )

        element = ET.fromstring(response.data.decode())
        if not element.text:
            region = "us-east-1"
        elif element.text == "EU" and self._base_url.is_aws_host:
            region = "eu-west-1"
        else:
            region = element.text

        self._region_map.set(bucket_name, region)
        return region

    def set_app_info(self, app_name: str, app_version: str):
        """
        Set your application name and version to user agent header.

        :param app_name: Application name.
        :param app_version: Application version.

        Example::
            client.set_app_info('my_app', '1.0.2')
        """
        if not (app_name and app_version):
            raise ValueError("Application name/version cannot be empty.")
        self._user_agent = f"{_DEFAULT_USER_AGENT} {app_name}/{app_version}"

    def trace_on(self, stream: TextIO):
        """
        Enable http trace.

        :param stream: Stream for writing HTTP call tracing.
        """
        if not stream:
            raise ValueError('Input stream for trace output is invalid.')
        # Save new output stream.
        self._trace_stream = stream

    def trace_off(self):
        """Disable HTTP trace."""
        self._trace_stream = None

    def _put_object(
            self,
            bucket_name: str,
            object_name: str,
            data: Body,
            length: int,
            headers: Optional[Mapping[str, str]] = None,
            query_params: Optional[Mapping[str, str]] = None,
            md5sum: Optional[bytes] = None,
            sha256sum: Optional[bytes] = None,
    ) -> ObjectWriteResult:
        """Execute PutObject S3 API."""
        headers = dict(headers or {})
        if md5sum:
            headers["Content-MD5"] = base64_string(md5sum)
        if sha256sum:
            headers["x-amz-content-sha256"] = hex_string(sha256sum)
        response = self._execute(
            method="PUT",
            bucket_name=bucket_name,
            object_name=object_name,
            body=data,
            headers=headers,
            query_params=query_params,
            no_body_trace=True,
            content_length=length,
        )
        return ObjectWriteResult(
            bucket_name,
            object_name,
            response.headers.get("x-amz-version-id"),
            (response.headers.get("etag") or "").replace('"', "") or None,
            response.headers,
            size=length,
        )

    def create_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            headers: Mapping[str, str],
    ) -> str:
        """Execute CreateMultipartUpload S3 API and return upload ID."""
        headers = dict(headers)
        if not headers.get("Content-Type"):
            headers["Content-Type"] = "application/octet-stream"
        response = self._execute(
            method="POST",
            bucket_name=bucket_name,
            object_name=object_name,
            headers=headers,
            query_params={"uploads": ""},
        )
        element = ET.fromstring(response.data.decode())
        return cast(str, findtext(element, "UploadId", True))

    def upload_part(
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
        """
        Execute UploadPart S3 API. The returned part carries the ETag from
        the server and ``length`` as its size.
        """
        result = self._put_object(
            bucket_name,
            object_name,
            data,
            length,
            query_params={
                "partNumber": str(part_number),
                "uploadId": upload_id,
            },
            md5sum=md5sum,
            sha256sum=sha256sum,
        )
        return Part(part_number, cast(str, result.etag), size=length)

    def complete_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
            parts: list[Part],
    ) -> ObjectWriteResult:
        """Execute CompleteMultipartUpload S3 API."""
        element = Element("CompleteMultipartUpload")
        for part in parts:
            tag = SubElement(element, "Part")
            SubElement(tag, "PartNumber", str(part.part_number))
            SubElement(tag, "ETag", '"' + part.etag + '"')
        body = getbytes(element)
        response = self._execute(
            method="POST",
            bucket_name=bucket_name,
            object_name=object_name,
            body=body,
            headers={
                "Content-Type": 'application/xml',
                "Content-MD5": base64_string(MD5.hash(body)),
            },
            query_params={"uploadId": upload_id},
        )
        result = CompleteMultipartUploadResult(response)
        return ObjectWriteResult(
            result.bucket_name or bucket_name,
            result.object_name or object_name,
            result.version_id,
            result.etag,
            result.http_headers,
            location=result.location,
            upload_id=upload_id,
        )

    def abort_multipart_upload(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
    ):
        """
        Execute AbortMultipartUpload S3 API. Uploads are never aborted
        implicitly; call this to discard a failed upload and its parts.

        :param bucket_name: Name of the bucket.
        :param object_name: Object name in the bucket.
        :param upload_id: Upload ID.

        Example::
            client.abort_multipart_upload(
                "my-bucket", "my-object", error.upload_id,
            )
        """
        check_bucket_name(bucket_name)
        check_object_name(object_name)
        self._execute(
            method="DELETE",
            bucket_name=bucket_name,
            object_name=object_name,
            query_params={"uploadId": upload_id},
        )

    def _list_parts(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
            max_parts: Optional[int] = None,
            part_number_marker: Optional[str] = None,
    ) -> ListPartsResult:
        """
        Execute ListParts S3 API.

        :param bucket_name: Name of the bucket.
        :param object_name: Object name in the bucket.
        :param upload_id: Upload ID.
        :param max_parts: (Optional) Maximum parts information to fetch.
        :param part_number_marker: (Optional) Part number marker.
        :return: :class:`ListPartsResult <ListPartsResult>` object
        """

        query_params = {
            "uploadId": upload_id,
            "max-parts": str(max_parts or 1000),
        }
        if part_number_marker:
            query_params["part-number-marker"] = part_number_marker

        response = self._execute(
            method="GET",
            bucket_name=bucket_name,
            object_name=object_name,
            query_params=query_params,
        )
        return ListPartsResult.fromxml(ET.fromstring(response.data.decode()))

    def list_parts(
            self,
            bucket_name: str,
            object_name: str,
            upload_id: str,
    ) -> Iterator[Part]:
        """
        List every part uploaded so far to a multipart upload, following
        ListParts pagination to the end.

        :param bucket_name: Name of the bucket.
        :param object_name: Object name in the bucket.
        :param upload_id: Upload ID.
        :return: Iterator of :class:`Part <Part>` object.

        Example::
            for part in client.list_parts("my-bucket", "my-object", upload_id):
                print(part.part_number, part.size)
        """
        check_bucket_name(bucket_name)
        check_object_name(object_name)
        part_number_marker = None
        while True:
            result = self._list_parts(
                bucket_name, object_name, upload_id,
                part_number_marker=part_number_marker,
            )
            yield from result.parts
            if not result.is_truncated or not result.next_part_number_marker:
                return
            part_number_marker = result.next_part_number_marker

    def _list_multipart_uploads(
            self,
            bucket_name: str,
            prefix: Optional[str] = None,
            key_marker: Optional[str] = None,
            upload_id_marker: Optional[str] = None,
            max_uploads: Optional[int] = None,
    ) -> ListMultipartUploadsResult:
        """
        Execute ListMultipartUploads S3 API.

        :param bucket_name: Name of the bucket.
        :param prefix: (Optional) Prefix on listing.
        :param key_marker: (Optional) Key marker.
        :param upload_id_marker: (Optional) Upload ID marker.
        :param max_uploads: (Optional) Maximum upload information to fetch.
        :return:
            :class:`ListMultipartUploadsResult <ListMultipartUploadsResult>`
                object
        """

        query_params = {
            "uploads": "",
            "max-uploads": str(max_uploads or 1000),
            "prefix": prefix or "",
            "encoding-type": "url",
        }
        if key_marker:
            query_params["key-marker"] = key_marker
        if upload_id_marker:
            query_params["upload-id-marker"] = upload_id_marker

        response = self._execute(
            method="GET",
            bucket_name=bucket_name,
            query_params=query_params,
        )
        return ListMultipartUploadsResult.fromxml(
            ET.fromstring(response.data.decode()),
        )

    def list_incomplete_uploads(
            self,
            bucket_name: str,
            prefix: str = "",
    ) -> Iterator[Upload]:
        """
        List multipart uploads not completed nor aborted yet.

        :param bucket_name: Name of the bucket.
        :param prefix: Object name prefix to filter on.
        :return: Iterator of :class:`Upload <Upload>` object.

        Example::
            for upload in client.list_incomplete_uploads("my-bucket"):
                print(upload.object_name, upload.upload_id)
        """
        check_bucket_name(bucket_name)
        key_marker = None
        upload_id_marker = None
        while True:
            result = self._list_multipart_uploads(
                bucket_name,
                prefix=prefix,
                key_marker=key_marker,
                upload_id_marker=upload_id_marker,
            )
            yield from result.uploads
            if not result.is_truncated:
                return
            key_marker = result.next_key_marker
            upload_id_marker = result.next_upload_id_marker
            if not (key_marker or upload_id_marker):
                return

    def find_upload_id(
            self,
            bucket_name: str,
            object_name: str,
    ) -> Optional[str]:
        """
        Get upload ID of the most recently initiated incomplete upload of
        the object, if any.
        """
        latest: Optional[Upload] = None
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        for upload in self.list_incomplete_uploads(bucket_name, object_name):
            if upload.object_name != object_name:
                continue
            if latest is None or (
                    (upload.initiated_time or oldest) >
                    (latest.initiated_time or oldest)
            ):
                latest = upload
        return latest.upload_id if latest else None

    def _single_put(
            self,
            bucket_name: str,
            object_name: str,
            data: BinaryIO,
            length: int,
            headers: dict[str, str],
            progress: Optional[ProgressType] = None,
    ) -> ObjectWriteResult:
        """Upload data of length fitting in one part by PutObject S3 API."""
        hashers = PartHashers(not self._base_url.is_https)
        body: Body
        if is_random_access(data):
            reader = ReaderAt(data)
            read = hashers.update_all(reader.chunks(0, length))
            body = SectionReader(reader, 0, read)
        else:
            body = read_part_data(data, length, progress=progress)
            hashers.update(body)
            read = len(body)
            progress = None
        if read != length:
            raise UnexpectedShortReadError(
                read, length, bucket_name, object_name,
            )
        result = self._put_object(
            bucket_name,
            object_name,
            body,
            length,
            headers=headers,
            md5sum=hashers.md5sum,
            sha256sum=hashers.sha256sum,
        )
        if progress:
            progress.update(length)
        return result

    def put_object(
            self,
            bucket_name: str,
            object_name: str,
            data: BinaryIO,
            length: int,
            content_type: str = "application/octet-stream",
            metadata: Optional[Mapping[str, str]] = None,
            progress: Optional[ProgressType] = None,
            part_size: int = 0,
            num_parallel_uploads: int = 0,
            upload_id: Optional[str] = None,
            resume: bool = False,
            legacy_part_size: bool = False,
            cancel_event: Optional[threading.Event] = None,
    ) -> ObjectWriteResult:
        """
        Uploads data from a stream to an object in a bucket.

        Data of known length fitting in one part is sent by a single PUT.
        Anything else goes through a multipart upload which is left open
        on failure; the raised error carries its upload ID to resume with.

        :param bucket_name: Name of the bucket.
        :param object_name: Object name in the bucket.
        :param data: An object having callable read() returning bytes object.
        :param length: Data size; -1 for unknown size.
        :param content_type: Content type of the object.
        :param metadata: Any additional metadata to be uploaded along
            with your PUT request.
        :param progress: A progress object.
        :param part_size: Multipart part size; 0 computes the smallest
            multiple of 128MiB fitting the object in 10000 parts.
        :param num_parallel_uploads: Number of parallel uploads; 0 uses one
            less than the number of CPUs.
        :param upload_id: Upload ID of an incomplete upload to resume.
        :param resume: Resume the latest incomplete upload of the object if
            there is one.
        :param legacy_part_size: Use the ``5TiB / 9999`` default part size
            of uploads created by older clients.
        :param cancel_event: Event stopping the upload when set.
        :return: :class:`ObjectWriteResult` object.

        Example::
            result = client.put_object(
                "my-bucket", "my-object", io.BytesIO(b"hello"), 5,
            )

            # Upload data of unknown size.
            result = client.put_object(
                "my-bucket", "my-object", sys.stdin.buffer, -1,
                part_size=10*1024*1024,
            )
        """
        check_bucket_name(bucket_name)
        check_object_name(object_name)
        if not callable(getattr(data, "read", None)):
            raise ValueError("input data must have callable read()")
        if length < -1:
            raise ValueError(f"length {length} must be -1 or greater")

        plan = optimal_part_info(length, part_size, legacy_part_size)
        if progress:
            # Set progress bar length and object name before upload
            progress.set_meta(object_name=object_name, total_length=length)

        headers = {
            key: value for key, value in normalize_headers(metadata).items()
            if key.lower() != "content-type"
        }
        headers["Content-Type"] = content_type or "application/octet-stream"

        if (
                length >= 0 and plan.part_count == 1 and
                not upload_id and not resume
        ):
            return self._single_put(
                bucket_name, object_name, data, length, headers, progress,
            )

        if resume and not upload_id:
            upload_id = self.find_upload_id(bucket_name, object_name)

        uploader = MultipartUploader(
            self,
            bucket_name,
            object_name,
            num_threads=num_parallel_uploads,
            progress=progress,
            cancel_event=cancel_event,
            compute_sha256=not self._base_url.is_https,
        )
        return uploader.upload(data, plan, headers, upload_id)

    def fput_object(
            self,
            bucket_name: str,
            object_name: str,
            file_path: str,
            content_type: str = "application/octet-stream",
            metadata: Optional[Mapping[str, str]] = None,
            progress: Optional[ProgressType] = None,
            part_size: int = 0,
            num_parallel_uploads: int = 0,
            upload_id: Optional[str] = None,
            resume: bool = False,
            legacy_part_size: bool = False,
            cancel_event: Optional[threading.Event] = None,
    ) -> ObjectWriteResult:
        """
        Uploads data from a file to an object in a bucket.

        :param bucket_name: Name of the bucket.
        :param object_name: Object name in the bucket.
        :param file_path: Name of file to upload.
        :return: :class:`ObjectWriteResult` object.

        Other parameters are as in :meth:`put_object`.

        Example::
            result = client.fput_object(
                "my-bucket", "my-object", "my-filename", resume=True,
            )
        """
        with open(file_path, "rb") as file_data:
            file_size = os.fstat(file_data.fileno()).st_size
            return self.put_object(
                bucket_name,
                object_name,
                file_data,
                file_size,
                content_type=content_type,
                metadata=metadata,
                progress=progress,
                part_size=part_size,
                num_parallel_uploads=num_parallel_uploads,
                upload_id=upload_id,
                resume=resume,
                legacy_part_size=legacy_part_size,
                cancel_event=cancel_event,
            )
