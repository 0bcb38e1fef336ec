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

import logging

from s3multipart import Client, PartUploadError

logging.basicConfig(level=logging.INFO)

client = Client(
    endpoint="play.min.io",
    access_key="Q3AM3UQ867SPQQA43P2F",
    secret_key="zuf+tfteSlswRu7BJ86wekitnifILbZam1KYY3TG",
)

# List incomplete uploads of the bucket.
for upload in client.list_incomplete_uploads("my-bucket"):
    print(upload.object_name, upload.upload_id, upload.initiated_time)

# Upload a file, continuing the latest incomplete upload of the object
# if there is one.
try:
    result = client.fput_object(
        "my-bucket", "my-object", "my-filename", resume=True,
    )
    print(f"created {result.object_name} object; etag: {result.etag}")
except PartUploadError as exc:
    print(f"part {exc.part_number} failed; upload {exc.upload_id} kept")
    for part in client.list_parts("my-bucket", "my-object", exc.upload_id):
        print(part.part_number, part.size, part.etag)

    # Retry the same upload ID; only missing parts are sent.
    try:
        client.fput_object(
            "my-bucket", "my-object", "my-filename", upload_id=exc.upload_id,
        )
    except PartUploadError:
        # Give up and discard the uploaded parts.
        client.abort_multipart_upload("my-bucket", "my-object", exc.upload_id)
        raise
