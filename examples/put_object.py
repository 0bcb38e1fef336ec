# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage,
# (C) 2015 MinIO, Inc.
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
from urllib.request import urlopen

from s3multipart import Client

client = Client(
    endpoint="play.min.io",
    access_key="Q3AM3UQ867SPQQA43P2F",
    secret_key="zuf+tfteSlswRu7BJ86wekitnifILbZam1KYY3TG",
)

# Upload data.
result = client.put_object(
    bucket_name="my-bucket",
    object_name="my-object",
    data=io.BytesIO(b"hello"),
    length=5,
)
print(f"created {result.object_name} object; etag: {result.etag}")

# Upload unknown sized data.
with urlopen(
    "https://cdn.kernel.org/pub/linux/kernel/v5.x/linux-5.4.81.tar.xz",
) as data:
    result = client.put_object(
        bucket_name="my-bucket",
        object_name="my-object",
        data=data,
        length=-1,
        part_size=10*1024*1024,
    )
    print(
        f"created {result.object_name} object; etag: {result.etag}, "
        f"upload-id: {result.upload_id}, size: {result.size}",
    )

# Upload data with content-type and metadata.
result = client.put_object(
    bucket_name="my-bucket",
    object_name="my-object",
    data=io.BytesIO(b"hello"),
    length=5,
    content_type="application/csv",
    metadata={"My-Project": "one"},
)
print(f"created {result.object_name} object; etag: {result.etag}")

# Upload large data with 4 parallel part uploads.
result = client.put_object(
    bucket_name="my-bucket",
    object_name="my-object",
    data=io.BytesIO(bytes(64*1024*1024)),
    length=64*1024*1024,
    part_size=16*1024*1024,
    num_parallel_uploads=4,
)
print(
    f"created {result.object_name} object; etag: {result.etag}, "
    f"upload-id: {result.upload_id}",
)
