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
"""Aggregate statistics over detected cycles."""

import logging
from typing import Optional, Sequence, Set
from dataclasses import dataclass

import numpy as np

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import ValidationError
from depmap.cycle_detector import CycleInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleStatistics:
    """Cycle statistics for one analysis run.

    Attributes:
        total_cycles: Number of detected cycles
        largest_cycle_size: Size of the largest cycle (0 if none)
        total_projects_in_cycles: Distinct projects participating in any cycle
        total_projects_analyzed: Number of vertices in the graph
        participation_rate: total_projects_in_cycles / total_projects_analyzed * 100 (0 when nothing analyzed)
        average_cycle_size: Mean cycle size (0 if none)
        median_cycle_size: Median cycle size (0 if none)
    """

    total_cycles: int
    largest_cycle_size: int
    total_projects_in_cycles: int
    total_projects_analyzed: int
    participation_rate: float
    average_cycle_size: float = 0.0
    median_cycle_size: float = 0.0


def compute_participation_rate(projects_in_cycles: int, total_projects: int) -> float:
    """Percentage of projects participating in cycles, clamped to [0, 100]."""
    if total_projects <= 0:
        return 0.0
    return min(100.0, max(0.0, projects_in_cycles / total_projects * 100.0))


def calculate_cycle_statistics(
    cycles: Sequence[CycleInfo], total_projects_analyzed: int, cancel_token: Optional[CancellationToken] = None
) -> CycleStatistics:
    """Calculate cycle statistics.

    A project that belongs to several overlapping cycles is counted once.

    Args:
        cycles: Detected cycles
        total_projects_analyzed: Number of vertices in the analyzed graph
        cancel_token: Optional cooperative cancellation token

    Returns:
        CycleStatistics

    Raises:
        ValidationError: If cycles is None or total_projects_analyzed is negative
    """
    if cycles is None:
        raise ValidationError("cycles must not be None")
    if total_projects_analyzed < 0:
        raise ValidationError(f"total_projects_analyzed must be non-negative, got {total_projects_analyzed}")

    if not cycles:
        logger.info("No cycles detected, statistics calculation skipped")
        return CycleStatistics(0, 0, 0, total_projects_analyzed, 0.0)

    members: Set[str] = set()
    for cycle in cycles:
        check_cancelled(cancel_token)
        members.update(cycle.member_keys())

    sizes = [cycle.cycle_size for cycle in cycles]
    statistics = CycleStatistics(
        total_cycles=len(cycles),
        largest_cycle_size=max(sizes),
        total_projects_in_cycles=len(members),
        total_projects_analyzed=total_projects_analyzed,
        participation_rate=compute_participation_rate(len(members), total_projects_analyzed),
        average_cycle_size=float(np.mean(sizes)),
        median_cycle_size=float(np.median(sizes)),
    )

    logger.info(
        "Cycle statistics: %s chains, %s projects (%.1f%%), largest: %s",
        statistics.total_cycles,
        statistics.total_projects_in_cycles,
        statistics.participation_rate,
        statistics.largest_cycle_size,
    )
    return statistics
