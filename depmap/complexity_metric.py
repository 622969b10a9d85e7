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
"""Complexity metric: average cyclomatic complexity per method, banded to 0-100.

Bands:
    avg <= 0      -> 0
    (0, 7]        -> 0..33   (simple, easy to move)
    (7, 15]       -> 33..66
    (15, 25]      -> 66..90
    above 25      -> 90..100 over the next 10, then saturates

Complexity comes from an external semantic analysis collaborator. Projects
without data score a neutral 50 with a Fallback marker.
"""

import math
import logging
from typing import Mapping, Optional

from depmap.constants import (
    COMPLEXITY_FALLBACK_SCORE,
    EASY_MAX_SCORE,
    HIGH_COMPLEXITY_THRESHOLD,
    LOW_COMPLEXITY_THRESHOLD,
    MEDIUM_COMPLEXITY_THRESHOLD,
    MEDIUM_MAX_SCORE,
    VERY_HIGH_COMPLEXITY_RANGE,
)
from depmap.graph_model import ProjectVertex
from depmap.metric_types import ComplexityData, ComplexityMetric, Fallback, MetricCalculator, MetricKind, build_project_lookup, clamp_score

logger = logging.getLogger(__name__)

_HIGH_BAND_TOP = 90.0


def normalize_complexity(average_complexity: float) -> float:
    """Map an average cyclomatic complexity onto the 0-100 band scale."""
    if average_complexity <= 0:
        return 0.0
    if average_complexity <= LOW_COMPLEXITY_THRESHOLD:
        return average_complexity / LOW_COMPLEXITY_THRESHOLD * EASY_MAX_SCORE
    if average_complexity <= MEDIUM_COMPLEXITY_THRESHOLD:
        fraction = (average_complexity - LOW_COMPLEXITY_THRESHOLD) / (MEDIUM_COMPLEXITY_THRESHOLD - LOW_COMPLEXITY_THRESHOLD)
        return EASY_MAX_SCORE + fraction * (MEDIUM_MAX_SCORE - EASY_MAX_SCORE)
    if average_complexity <= HIGH_COMPLEXITY_THRESHOLD:
        fraction = (average_complexity - MEDIUM_COMPLEXITY_THRESHOLD) / (HIGH_COMPLEXITY_THRESHOLD - MEDIUM_COMPLEXITY_THRESHOLD)
        return MEDIUM_MAX_SCORE + fraction * (_HIGH_BAND_TOP - MEDIUM_MAX_SCORE)
    return clamp_score(_HIGH_BAND_TOP + (average_complexity - HIGH_COMPLEXITY_THRESHOLD) / VERY_HIGH_COMPLEXITY_RANGE * 10.0)


def _invalid_reason(data: ComplexityData) -> Optional[str]:
    if isinstance(data.method_count, bool) or not isinstance(data.method_count, int) or data.method_count < 0:
        return f"invalid method count {data.method_count!r}"
    average = data.average_complexity
    if isinstance(average, bool) or not isinstance(average, (int, float)) or math.isnan(average) or math.isinf(average):
        return f"invalid average complexity {average!r}"
    if average < 0:
        return f"negative average complexity {average}"
    return None


class ComplexityMetricCalculator(MetricCalculator):
    """Complexity metric from pre-resolved per-project complexity data.

    Args:
        complexity_data: Project path -> ComplexityData; projects that are
            missing or map to None are treated as unavailable
    """

    kind = MetricKind.COMPLEXITY

    def __init__(self, complexity_data: Optional[Mapping[str, Optional[ComplexityData]]] = None) -> None:
        self._lookup = build_project_lookup(complexity_data, "complexity data")

    def calculate(self, project: ProjectVertex) -> ComplexityMetric:
        data = self._lookup.get(project.key)
        if data is None:
            return self._fallback(project, "complexity data unavailable")

        reason = _invalid_reason(data)
        if reason is not None:
            return self._fallback(project, reason)

        # No methods means nothing to untangle
        average = float(data.average_complexity) if data.method_count > 0 else 0.0
        normalized = normalize_complexity(average)
        logger.debug(
            "Project %s: methods=%s, average=%.2f, normalized=%.2f", project.name, data.method_count, average, normalized
        )
        return ComplexityMetric(
            project_path=project.path,
            project_name=project.name,
            method_count=data.method_count,
            average_complexity=average,
            normalized_score=normalized,
        )

    def _fallback(self, project: ProjectVertex, reason: str) -> ComplexityMetric:
        logger.warning(
            "Complexity analysis unavailable for %s, defaulting to neutral score %s: %s",
            project.name,
            COMPLEXITY_FALLBACK_SCORE,
            reason,
        )
        return ComplexityMetric(
            project_path=project.path,
            project_name=project.name,
            method_count=0,
            average_complexity=0.0,
            normalized_score=COMPLEXITY_FALLBACK_SCORE,
            fallback=Fallback(reason),
        )
