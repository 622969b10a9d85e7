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
"""Type definitions for extraction difficulty metrics.

Each of the four metric calculators turns one project plus its external data
into a record carrying a NormalizedScore in [0, 100]. When the external data
is missing or unusable the record carries a Fallback marker naming the
reason, next to the documented neutral score, so degradation stays visible
to tests and logs.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, TypeVar, Union
from dataclasses import dataclass

from depmap.constants import NORMALIZED_SCORE_MAX, NORMALIZED_SCORE_MIN, ValidationError
from depmap.graph_model import ProjectVertex, project_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MetricKind(Enum):
    """The closed set of extraction metrics."""

    COUPLING = "coupling"
    COMPLEXITY = "complexity"
    TECH_DEBT = "tech_debt"
    EXTERNAL_API = "external_api"


@dataclass(frozen=True)
class Fallback:
    """Marker for a metric whose score is a documented neutral value, not a measurement."""

    reason: str

    def __str__(self) -> str:
        return f"fallback: {self.reason}"


def clamp_score(value: float) -> float:
    """Clamp a score into [0, 100]."""
    return max(NORMALIZED_SCORE_MIN, min(NORMALIZED_SCORE_MAX, float(value)))


def _validate_score(metric: str, project_path: str, score: float) -> None:
    if not NORMALIZED_SCORE_MIN <= score <= NORMALIZED_SCORE_MAX:
        raise ValidationError(f"{metric} score for {project_path} must be within 0-100, got {score}")


@dataclass(frozen=True)
class CouplingMetric:
    """Graph coupling of one project.

    Attributes:
        project_path: Identity path of the project
        project_name: Display name
        incoming_count: Projects that depend on this project
        outgoing_count: Projects this project depends on
        total_score: incoming * 2 + outgoing
        normalized_score: total_score relative to the graph maximum, 0-100
        fallback: Set when no measurement was possible
    """

    project_path: str
    project_name: str
    incoming_count: int
    outgoing_count: int
    total_score: int
    normalized_score: float
    fallback: Optional[Fallback] = None

    def __post_init__(self) -> None:
        _validate_score("Coupling", self.project_path, self.normalized_score)

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None


@dataclass(frozen=True)
class ComplexityMetric:
    """Cyclomatic complexity of one project.

    Attributes:
        project_path: Identity path of the project
        project_name: Display name
        method_count: Number of analyzed methods (0 when unavailable)
        average_complexity: Average cyclomatic complexity per method
        normalized_score: Banded score, 0-100
        fallback: Set when complexity data was unavailable
    """

    project_path: str
    project_name: str
    method_count: int
    average_complexity: float
    normalized_score: float
    fallback: Optional[Fallback] = None

    def __post_init__(self) -> None:
        _validate_score("Complexity", self.project_path, self.normalized_score)

    @property
    def total_complexity(self) -> float:
        return self.method_count * self.average_complexity

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None


@dataclass(frozen=True)
class TechDebtMetric:
    """Technology age of one project, from its declared target framework.

    Attributes:
        project_path: Identity path of the project
        project_name: Display name
        target_framework: Raw target framework string as declared (None if unavailable)
        normalized_moniker: Moniker the score was looked up with (None if unparsable)
        normalized_score: 100 = oldest framework, 0 = current
        fallback: Set when the framework was unavailable or unknown
    """

    project_path: str
    project_name: str
    target_framework: Optional[str]
    normalized_moniker: Optional[str]
    normalized_score: float
    fallback: Optional[Fallback] = None

    def __post_init__(self) -> None:
        _validate_score("TechDebt", self.project_path, self.normalized_score)

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None


@dataclass(frozen=True)
class ExternalApiMetric:
    """Externally callable surface of one project.

    Attributes:
        project_path: Identity path of the project
        project_name: Display name
        endpoint_count: Number of externally callable endpoints (0 when unavailable)
        normalized_score: Stepped score, 0-100
        fallback: Set when endpoint data was unavailable
    """

    project_path: str
    project_name: str
    endpoint_count: int
    normalized_score: float
    fallback: Optional[Fallback] = None

    def __post_init__(self) -> None:
        _validate_score("ExternalApi", self.project_path, self.normalized_score)

    @property
    def is_fallback(self) -> bool:
        return self.fallback is not None


MetricRecord = Union[CouplingMetric, ComplexityMetric, TechDebtMetric, ExternalApiMetric]


@dataclass(frozen=True)
class ComplexityData:
    """Complexity measurement supplied by the semantic analysis collaborator."""

    method_count: int
    average_complexity: float


class MetricCalculator(ABC):
    """Capability shared by the four metric calculators: project -> metric record.

    Calculators are side-effect free once constructed and never raise for
    missing data; they return a record carrying a Fallback instead.
    """

    kind: MetricKind

    @abstractmethod
    def calculate(self, project: ProjectVertex) -> MetricRecord:
        """Compute the metric for one project."""


def build_project_lookup(data: Optional[Mapping[str, T]], description: str) -> Dict[str, T]:
    """Re-key per-project external data by project identity.

    Args:
        data: Project path -> value mapping (may be None)
        description: What the data is, for log messages

    Returns:
        Identity key -> value; entries with malformed paths are logged and dropped
    """
    lookup: Dict[str, T] = {}
    if not data:
        return lookup
    for path, value in data.items():
        try:
            lookup[project_key(path)] = value
        except ValidationError:
            logger.warning("Ignoring %s for malformed project path %r", description, path)
    return lookup


def describe_metric(record: Any) -> str:
    """Short label for reports: the score, plus the fallback reason when present."""
    if record is None:
        return "n/a"
    if record.fallback is not None:
        return f"{record.normalized_score:.1f} ({record.fallback})"
    return f"{record.normalized_score:.1f}"
