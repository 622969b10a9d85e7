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
"""Tech debt metric: how far behind a project's target framework is.

Scores come from a fixed, monotonic lookup by target framework moniker
(oldest = 100, current = 0). Multi-target strings use the first declared
target. Missing or unrecognized frameworks score a neutral 50 with a
Fallback marker.
"""

import re
import logging
from typing import Dict, Mapping, Optional

from depmap.constants import TECH_DEBT_FALLBACK_SCORE
from depmap.graph_model import ProjectVertex
from depmap.metric_types import Fallback, MetricCalculator, MetricKind, TechDebtMetric, build_project_lookup

logger = logging.getLogger(__name__)

# Release timeline: older framework = higher debt
FRAMEWORK_DEBT_SCORES: Dict[str, float] = {
    # .NET Framework
    "net35": 100.0,
    "net3.5": 100.0,
    "net40": 90.0,
    "net4.0": 90.0,
    "net45": 80.0,
    "net4.5": 80.0,
    "net451": 75.0,
    "net452": 70.0,
    "net46": 65.0,
    "net4.6": 65.0,
    "net461": 60.0,
    "net462": 55.0,
    "net47": 50.0,
    "net4.7": 50.0,
    "net471": 45.0,
    "net472": 40.0,
    "net48": 40.0,
    "net4.8": 40.0,
    "net481": 40.0,
    # .NET Standard
    "netstandard1.0": 70.0,
    "netstandard1.1": 70.0,
    "netstandard1.2": 70.0,
    "netstandard1.3": 70.0,
    "netstandard1.4": 70.0,
    "netstandard1.5": 70.0,
    "netstandard1.6": 70.0,
    "netstandard2.0": 50.0,
    "netstandard2.1": 35.0,
    # .NET Core
    "netcoreapp1.0": 40.0,
    "netcoreapp1.1": 40.0,
    "netcoreapp2.0": 40.0,
    "netcoreapp2.1": 40.0,
    "netcoreapp2.2": 40.0,
    "netcoreapp3.0": 35.0,
    "netcoreapp3.1": 30.0,
    # .NET 5+
    "net5.0": 20.0,
    "net6.0": 10.0,
    "net7.0": 5.0,
    "net8.0": 0.0,
    "net9.0": 0.0,
    "net10.0": 0.0,
}

_LEGACY_VERSION = re.compile(r"^v(\d+(?:\.\d+)*)$")
_MODERN_MAJOR_ONLY = re.compile(r"^net([5-9]|10)$")


def normalize_target_framework(target_framework: Optional[str]) -> Optional[str]:
    """Normalize a raw target framework string to a lookup moniker.

    Examples:
        "net8.0-windows"             -> "net8.0"
        "net6"                       -> "net6.0"
        "netstandard2.0;net472"      -> "netstandard2.0"
        "v4.7.2"                     -> "net472"

    Returns:
        The moniker, or None when nothing usable is left
    """
    if target_framework is None:
        return None
    moniker = target_framework.strip().lower()
    if ";" in moniker:
        moniker = moniker.split(";")[0].strip()
    if not moniker:
        return None

    legacy = _LEGACY_VERSION.match(moniker)
    if legacy:
        return "net" + legacy.group(1).replace(".", "")

    # Platform suffix: net6.0-windows, net8.0-android34.0
    moniker = moniker.split("-", 1)[0]
    if _MODERN_MAJOR_ONLY.match(moniker):
        moniker += ".0"
    return moniker or None


def lookup_tech_debt_score(target_framework: Optional[str]) -> Optional[float]:
    """Debt score for a raw target framework string, or None if unknown."""
    moniker = normalize_target_framework(target_framework)
    if moniker is None:
        return None
    return FRAMEWORK_DEBT_SCORES.get(moniker)


class TechDebtMetricCalculator(MetricCalculator):
    """Tech debt metric from pre-resolved per-project target framework strings.

    Args:
        target_frameworks: Project path -> raw target framework string
            (TargetFramework, TargetFrameworks or TargetFrameworkVersion value)
    """

    kind = MetricKind.TECH_DEBT

    def __init__(self, target_frameworks: Optional[Mapping[str, Optional[str]]] = None) -> None:
        self._lookup = build_project_lookup(target_frameworks, "target framework")

    def calculate(self, project: ProjectVertex) -> TechDebtMetric:
        raw = self._lookup.get(project.key)
        if raw is None or not isinstance(raw, str):
            return self._fallback(project, raw, None, "target framework unavailable")

        moniker = normalize_target_framework(raw)
        if moniker is None:
            return self._fallback(project, raw, None, f"unparsable target framework {raw!r}")

        score = FRAMEWORK_DEBT_SCORES.get(moniker)
        if score is None:
            return self._fallback(project, raw, moniker, f"unknown target framework {moniker!r}")

        logger.debug("Project %s: framework=%s, score=%s", project.name, moniker, score)
        return TechDebtMetric(
            project_path=project.path,
            project_name=project.name,
            target_framework=raw,
            normalized_moniker=moniker,
            normalized_score=score,
        )

    def _fallback(self, project: ProjectVertex, raw: Optional[str], moniker: Optional[str], reason: str) -> TechDebtMetric:
        logger.warning(
            "Could not score target framework for %s, defaulting to neutral score %s: %s",
            project.name,
            TECH_DEBT_FALLBACK_SCORE,
            reason,
        )
        return TechDebtMetric(
            project_path=project.path,
            project_name=project.name,
            target_framework=raw if isinstance(raw, str) else None,
            normalized_moniker=moniker,
            normalized_score=TECH_DEBT_FALLBACK_SCORE,
            fallback=Fallback(reason),
        )
