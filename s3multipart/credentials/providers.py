# -*- coding: utf-8 -*-
# MinIO Python Library for Amazon S3 Compatible Cloud Storage,
# (C) 2020 MinIO, Inc.
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

"""Credential providers."""

from __future__ import annotations

import configparser
import os
from abc import ABC, abstractmethod
from pathlib import Path

from .credentials import Credentials


class Provider(ABC):  # pylint: disable=too-few-public-methods
    """Credential retriever."""

    @abstractmethod
    def retrieve(self) -> Credentials:
        """Retrieve credentials and its expiry if available."""


class StaticProvider(Provider):
    """Fixed credential provider."""

    def __init__(
            self,
            access_key: str,
            secret_key: str,
            session_token: str | None = None,
    ):
        self._credentials = Credentials(access_key, secret_key, session_token)

    def retrieve(self) -> Credentials:
        """Return passed credentials."""
        return self._credentials


class EnvAWSProvider(Provider):
    """Credential provider from AWS environment variables."""

    def retrieve(self) -> Credentials:
        """Retrieve credentials."""
        return Credentials(
            access_key=(
                os.environ.get("AWS_ACCESS_KEY_ID") or
                os.environ.get("AWS_ACCESS_KEY") or ""
            ),
            secret_key=(
                os.environ.get("AWS_SECRET_ACCESS_KEY") or
                os.environ.get("AWS_SECRET_KEY") or ""
            ),
            session_token=os.environ.get("AWS_SESSION_TOKEN"),
        )


class AWSConfigProvider(Provider):
    """Credential provider from AWS shared credential file."""

    def __init__(
            self,
            filename: str | None = None,
            profile: str | None = None,
    ):
        self._filename = (
            filename or
            os.environ.get("AWS_SHARED_CREDENTIALS_FILE") or
            str(Path.home() / ".aws" / "credentials")
        )
        self._profile = profile or os.environ.get("AWS_PROFILE") or "default"

    def retrieve(self) -> Credentials:
        """Retrieve credentials from AWS credential file."""
        parser = configparser.ConfigParser()
        parser.read(self._filename)

        def get(option: str) -> str | None:
            return parser.get(self._profile, option, fallback=None)

        access_key = get("aws_access_key_id")
        secret_key = get("aws_secret_access_key")
        if not access_key or not secret_key:
            raise ValueError(
                f"access key or secret key does not exist in profile "
                f"{self._profile} in AWS credential file {self._filename}"
            )
        return Credentials(
            access_key,
            secret_key,
            session_token=get("aws_session_token"),
        )


class ChainedProvider(Provider):
    """Chained credential provider."""

    def __init__(self, providers: list[Provider]):
        self._providers = providers
        self._provider: Provider | None = None
        self._credentials: Credentials | None = None

    def retrieve(self) -> Credentials:
        """Retrieve credentials from one of available provider."""
        if self._credentials and not self._credentials.is_expired():
            return self._credentials

        providers = list(self._providers)
        if self._provider:
            providers.insert(0, self._provider)

        for provider in providers:
            try:
                self._credentials = provider.retrieve()
            except ValueError:
                # Ignore this error and iterate other providers.
                continue
            self._provider = provider
            return self._credentials

        raise ValueError("All providers fail to fetch credentials")
