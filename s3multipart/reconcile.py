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

"""Reconciliation of planned parts with parts already on the server."""

from __future__ import annotations

import logging
from typing import Iterable

from .datatypes import MissingPart, MissingPartsInfo, Part, PartPlan

logger = logging.getLogger(__name__)


def get_missing_parts_info(
        reusable: dict[int, Part],
        plan: PartPlan,
) -> MissingPartsInfo:
    """
    Get offset and size of every planned part not in reusable. Empty for
    unknown object size, where parts are discovered while reading.
    """
    if plan.is_unknown_size:
        return {}
    return {
        part_number: MissingPart(
            plan.offset_of(part_number), plan.size_of(part_number),
        )
        for part_number in range(1, plan.part_count + 1)
        if part_number not in reusable
    }


def reconcile_parts(
        uploaded_parts: Iterable[Part],
        plan: PartPlan,
) -> tuple[dict[int, Part], MissingPartsInfo]:
    """
    Split planned parts into those already uploaded with the expected size
    and those still missing.

    Listed parts are taken in part number order; from the first gap in the
    sequence onwards nothing is reused. A part of unexpected size is
    missing. For unknown object size only full sized parts are reused.
    """
    reusable: dict[int, Part] = {}
    expected = 1
    for part in sorted(uploaded_parts, key=lambda part: part.part_number):
        if part.part_number < expected:
            continue  # duplicate entry
        if part.part_number != expected:
            logger.debug(
                "gap before part %d in uploaded parts; "
                "treating parts from %d onwards as missing",
                part.part_number, expected,
            )
            break
        expected += 1
        if part.part_number > plan.part_count:
            break

        size = (
            plan.part_size if plan.is_unknown_size
            else plan.size_of(part.part_number)
        )
        if part.size != size:
            logger.debug(
                "part %d has size %s, expected %d; uploading again",
                part.part_number, part.size, size,
            )
            if plan.is_unknown_size:
                break
            continue
        reusable[part.part_number] = part

    return reusable, get_missing_parts_info(reusable, plan)
