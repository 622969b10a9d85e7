#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""External API metric: how much externally callable surface a project exposes.

Endpoint counts come from an external semantic analysis collaborator and are
normalized in steps: 0 -> 0, 1-5 -> 33, 6-15 -> 66, 16 or more -> 100.
Projects without data are assumed to expose nothing (score 0) and carry a
Fallback marker.
"""

import logging
from typing import Mapping, Optional

from depmap.constants import EXTERNAL_API_FALLBACK_SCORE, LOW_API_EXPOSURE_MAX, MEDIUM_API_EXPOSURE_MAX
from depmap.graph_model import ProjectVertex
from depmap.metric_types import ExternalApiMetric, Fallback, MetricCalculator, MetricKind, build_project_lookup

logger = logging.getLogger(__name__)


def normalize_endpoint_count(endpoint_count: int) -> float:
    """Stepped exposure score for an endpoint count."""
    if endpoint_count <= 0:
        return 0.0
    if endpoint_count <= LOW_API_EXPOSURE_MAX:
        return 33.0
    if endpoint_count <= MEDIUM_API_EXPOSURE_MAX:
        return 66.0
    return 100.0


class ExternalApiMetricCalculator(MetricCalculator):
    """External API metric from pre-resolved per-project endpoint counts."""

    kind = MetricKind.EXTERNAL_API

    def __init__(self, endpoint_counts: Optional[Mapping[str, Optional[int]]] = None) -> None:
        self._lookup = build_project_lookup(endpoint_counts, "endpoint count")

    def calculate(self, project: ProjectVertex) -> ExternalApiMetric:
        count = self._lookup.get(project.key)
        if count is None:
            return self._fallback(project, "endpoint data unavailable")
        if isinstance(count, bool) or not isinstance(count, int):
            return self._fallback(project, f"invalid endpoint count {count!r}")
        if count < 0:
            return self._fallback(project, f"negative endpoint count {count}")

        score = normalize_endpoint_count(count)
        logger.debug("Project %s: endpoints=%s, score=%s", project.name, count, score)
        return ExternalApiMetric(
            project_path=project.path,
            project_name=project.name,
            endpoint_count=count,
            normalized_score=score,
        )

    def _fallback(self, project: ProjectVertex, reason: str) -> ExternalApiMetric:
        logger.warning("External API detection unavailable for %s, assuming no exposure: %s", project.name, reason)
        return ExternalApiMetric(
            project_path=project.path,
            project_name=project.name,
            endpoint_count=0,
            normalized_score=EXTERNAL_API_FALLBACK_SCORE,
            fallback=Fallback(reason),
        )
