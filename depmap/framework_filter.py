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
"""Framework and third-party project filtering.

Projects whose names match the block list (Microsoft.*, System.* and the
core library assemblies by default) are flagged as framework projects.
Allow-list patterns always win over the block list. Matching uses
case-insensitive shell-style wildcards.
"""

import fnmatch
import logging
import posixpath
import dataclasses
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass

from depmap.cancellation import CancellationToken, check_cancelled
from depmap.constants import ConfigurationError, ValidationError
from depmap.graph_builder import SolutionDataset, SolutionProject
from depmap.graph_model import DependencyGraph

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_LIST: Tuple[str, ...] = ("Microsoft.*", "System.*", "mscorlib", "netstandard")


@dataclass(frozen=True)
class FilterConfiguration:
    """Block and allow patterns for framework detection.

    Attributes:
        block_list: Name patterns treated as framework projects
        allow_list: Name patterns that are never treated as framework projects
    """

    block_list: Tuple[str, ...] = DEFAULT_BLOCK_LIST
    allow_list: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for pattern in self.block_list + self.allow_list:
            if not isinstance(pattern, str) or not pattern.strip():
                raise ConfigurationError(f"Filter patterns must be non-empty strings, got {pattern!r}")


def _matches(name: str, patterns: Sequence[str]) -> bool:
    folded = name.casefold()
    return any(fnmatch.fnmatchcase(folded, pattern.casefold()) for pattern in patterns)


def is_framework_project(name: str, config: Optional[FilterConfiguration] = None) -> bool:
    """Return True if a project name matches the block list and not the allow list."""
    if config is None:
        config = FilterConfiguration()
    if not name:
        return False
    if _matches(name, config.allow_list):
        return False
    return _matches(name, config.block_list)


def _project_name(project: SolutionProject) -> str:
    if project.name:
        return project.name
    base = posixpath.basename(project.path.replace("\\", "/"))
    return posixpath.splitext(base)[0]


def apply_framework_flags(
    solutions: Sequence[SolutionDataset], config: Optional[FilterConfiguration] = None
) -> List[SolutionDataset]:
    """Return copies of the solutions with each project's framework flag set.

    A flag already set by the input is kept; the filter only adds flags.
    """
    if solutions is None:
        raise ValidationError("solutions must not be None")
    if config is None:
        config = FilterConfiguration()

    flagged = 0
    result: List[SolutionDataset] = []
    for solution in solutions:
        projects = []
        for project in solution.projects:
            if not project.is_framework and is_framework_project(_project_name(project), config):
                project = dataclasses.replace(project, is_framework=True)
                flagged += 1
            projects.append(project)
        result.append(dataclasses.replace(solution, projects=tuple(projects)))

    logger.info("Flagged %s project(s) as framework using %s block pattern(s)", flagged, len(config.block_list))
    return result


def filter_framework_edges(
    graph: DependencyGraph,
    config: Optional[FilterConfiguration] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> DependencyGraph:
    """Return a new frozen graph without edges that point into framework projects.

    All vertices are kept, so framework projects still count towards totals.
    A target counts as framework when its flag is set or its name matches the
    block list.
    """
    if graph is None:
        raise ValidationError("graph must not be None")
    if config is None:
        config = FilterConfiguration()

    filtered = DependencyGraph()
    for vertex in graph.vertices:
        check_cancelled(cancel_token)
        filtered.add_vertex(vertex)

    blocked = 0
    for edge in graph.edges:
        check_cancelled(cancel_token)
        if edge.target.is_framework or is_framework_project(edge.target.name, config):
            blocked += 1
            logger.debug("Blocked framework reference %s", edge)
            continue
        filtered.add_edge(edge.source, edge.target)
    filtered.freeze()

    total = graph.edge_count
    if total > 0:
        logger.info(
            "Framework filter: %s of %s edges blocked (%.1f%%), %s retained (%.1f%%)",
            blocked,
            total,
            blocked / total * 100.0,
            total - blocked,
            (total - blocked) / total * 100.0,
        )
    else:
        logger.info("Framework filter: graph has no edges")
    return filtered
