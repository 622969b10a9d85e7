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
"""Load a pre-resolved analysis input file.

The input is a JSON document produced by the build-file parsing and source
analysis collaborators:

    {
        "solutions": [
            {
                "id": "Core",
                "projects": [
                    {
                        "path": "src/Core/Core.csproj",
                        "name": "Core",
                        "isFramework": false,
                        "references": ["src/Data/Data.csproj"],
                        "targetFramework": "net8.0",
                        "complexity": {"methodCount": 120, "averageComplexity": 4.2},
                        "externalEndpoints": 3
                    }
                ]
            }
        ],
        "callCounts": [
            {"source": "src/Core/Core.csproj", "target": "src/Data/Data.csproj", "count": 14}
        ]
    }

Relative paths resolve against the directory of the input file. Optional
per-project data that is absent stays absent; the metric calculators apply
their fallbacks.
"""

import os
import re
import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from depmap.constants import ValidationError
from depmap.graph_builder import SolutionDataset, SolutionProject
from depmap.metric_types import ComplexityData

logger = logging.getLogger(__name__)

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:[\\/]")


@dataclass
class AnalysisInput:
    """Plain-data input of one analysis run.

    Attributes:
        solutions: Solution datasets in file order
        call_counts: (source path, target path) -> method call count
        complexity_data: Project path -> complexity measurement
        target_frameworks: Project path -> raw target framework string
        endpoint_counts: Project path -> external endpoint count
    """

    solutions: List[SolutionDataset] = field(default_factory=list)
    call_counts: Dict[Tuple[str, str], int] = field(default_factory=dict)
    complexity_data: Dict[str, ComplexityData] = field(default_factory=dict)
    target_frameworks: Dict[str, str] = field(default_factory=dict)
    endpoint_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def project_count(self) -> int:
        return sum(len(solution.projects) for solution in self.solutions)


def resolve_input_path(path: str, base_dir: str) -> str:
    """Anchor a relative project path at base_dir; absolute and drive paths are returned unchanged."""
    if not isinstance(path, str) or not path.strip():
        raise ValidationError(f"Malformed project path: {path!r}")
    if path.startswith(("/", "\\")) or _DRIVE_PATTERN.match(path):
        return path
    return os.path.join(base_dir, path)


def _require(mapping: Dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValidationError(f"Missing '{key}' in {context}")
    return mapping[key]


def _parse_complexity(value: Any, project_path: str) -> Optional[ComplexityData]:
    if value is None:
        return None
    if not isinstance(value, dict):
        logger.warning("Ignoring malformed complexity data for %s: %r", project_path, value)
        return None
    return ComplexityData(method_count=value.get("methodCount", 0), average_complexity=value.get("averageComplexity", 0.0))


def _parse_project(raw: Any, solution_id: str, base_dir: str, result: AnalysisInput) -> SolutionProject:
    if not isinstance(raw, dict):
        raise ValidationError(f"Project entries of solution '{solution_id}' must be objects")

    path = resolve_input_path(_require(raw, "path", f"project of solution '{solution_id}'"), base_dir)
    references = raw.get("references", [])
    if not isinstance(references, list):
        raise ValidationError(f"'references' of {path} must be a list")

    resolved_refs = []
    for reference in references:
        try:
            resolved_refs.append(resolve_input_path(reference, base_dir))
        except ValidationError:
            logger.warning("Skipping malformed reference %r in %s", reference, path)

    if raw.get("targetFramework") is not None:
        result.target_frameworks[path] = raw["targetFramework"]
    complexity = _parse_complexity(raw.get("complexity"), path)
    if complexity is not None:
        result.complexity_data[path] = complexity
    if raw.get("externalEndpoints") is not None:
        result.endpoint_counts[path] = raw["externalEndpoints"]

    name = raw.get("name")
    if name is not None and not isinstance(name, str):
        raise ValidationError(f"'name' of {path} must be a string, got {name!r}")
    is_framework = raw.get("isFramework", False)
    if not isinstance(is_framework, bool):
        raise ValidationError(f"'isFramework' of {path} must be true or false, got {is_framework!r}")

    return SolutionProject(
        path=path,
        name=name or "",
        is_framework=is_framework,
        references=tuple(resolved_refs),
    )


def parse_analysis_input(data: Any, base_dir: str = ".") -> AnalysisInput:
    """Convert already-parsed JSON data into an AnalysisInput.

    Raises:
        ValidationError: If the document structure is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("Analysis input must be a JSON object")
    solutions = _require(data, "solutions", "analysis input")
    if not isinstance(solutions, list):
        raise ValidationError("'solutions' must be a list")

    result = AnalysisInput()
    for index, raw_solution in enumerate(solutions):
        if not isinstance(raw_solution, dict):
            raise ValidationError(f"Solution #{index + 1} must be an object")
        raw_id = raw_solution.get("id")
        solution_id = str(raw_id) if raw_id is not None else f"solution{index + 1}"
        raw_projects = raw_solution.get("projects", [])
        if not isinstance(raw_projects, list):
            raise ValidationError(f"'projects' of solution '{solution_id}' must be a list")
        projects = tuple(_parse_project(raw, solution_id, base_dir, result) for raw in raw_projects)
        result.solutions.append(SolutionDataset(solution_id=solution_id, projects=projects))

    for entry in data.get("callCounts", []) or []:
        if not isinstance(entry, dict) or "source" not in entry or "target" not in entry:
            logger.warning("Skipping malformed call count entry: %r", entry)
            continue
        try:
            key = (resolve_input_path(entry["source"], base_dir), resolve_input_path(entry["target"], base_dir))
        except ValidationError:
            logger.warning("Skipping call count entry with malformed path: %r", entry)
            continue
        count = entry.get("count", 0)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            logger.warning("Skipping call count entry with invalid count: %r", entry)
            continue
        # Repeated pairs accumulate, matching build_call_count_index()
        result.call_counts[key] = result.call_counts.get(key, 0) + count

    logger.info(
        "Loaded %s solution(s), %s project(s), %s call count(s)",
        len(result.solutions),
        result.project_count,
        len(result.call_counts),
    )
    return result


def load_analysis_input(filename: str) -> AnalysisInput:
    """Load an analysis input JSON file.

    Args:
        filename: Path to the input file

    Returns:
        AnalysisInput with paths anchored at the file's directory

    Raises:
        ValidationError: If the file cannot be read, is not valid JSON or is malformed
    """
    logger.info("Loading analysis input from %s", filename)
    try:
        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (IOError, OSError) as e:
        logger.error("Failed to load analysis input: %s", e)
        raise ValidationError(f"Failed to load analysis input from {filename}: {e}") from e
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in analysis input: %s", e)
        raise ValidationError(f"Invalid JSON in {filename}: {e}") from e

    return parse_analysis_input(data, os.path.dirname(os.path.abspath(filename)))
