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
"""Scoring weight and filter configuration.

Weights are validated here, before they reach the extraction score combiner:
each weight must lie in [0, 1] and the four must sum to 1.0 within 0.01.

Example configuration file (scoring-config.json):

    {
        "ScoringWeights": {
            "Coupling": 0.40,
            "Complexity": 0.30,
            "TechDebt": 0.20,
            "ExternalExposure": 0.10
        },
        "Filter": {
            "BlockList": ["Microsoft.*", "System.*"],
            "AllowList": ["Microsoft.Internal.*"]
        },
        "MaxWorkers": 4
    }
"""

import os
import json
import logging
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field

from depmap.constants import (
    DEFAULT_COMPLEXITY_WEIGHT,
    DEFAULT_COUPLING_WEIGHT,
    DEFAULT_EXTERNAL_EXPOSURE_WEIGHT,
    DEFAULT_MAX_WORKERS,
    DEFAULT_TECH_DEBT_WEIGHT,
    FILTER_SECTION,
    MAX_WORKERS_KEY,
    SCORING_WEIGHTS_SECTION,
    WEIGHT_SUM_TOLERANCE,
    ConfigurationError,
)
from depmap.framework_filter import DEFAULT_BLOCK_LIST, FilterConfiguration

logger = logging.getLogger(__name__)

# JSON key -> ScoringWeights field
_WEIGHT_KEYS = {
    "Coupling": "coupling",
    "Complexity": "complexity",
    "TechDebt": "tech_debt",
    "ExternalExposure": "external_exposure",
}


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the four extraction metrics.

    Attributes:
        coupling: Weight of the coupling metric
        complexity: Weight of the complexity metric
        tech_debt: Weight of the tech debt metric
        external_exposure: Weight of the external API metric
    """

    coupling: float = DEFAULT_COUPLING_WEIGHT
    complexity: float = DEFAULT_COMPLEXITY_WEIGHT
    tech_debt: float = DEFAULT_TECH_DEBT_WEIGHT
    external_exposure: float = DEFAULT_EXTERNAL_EXPOSURE_WEIGHT

    @property
    def total(self) -> float:
        return self.coupling + self.complexity + self.tech_debt + self.external_exposure

    def as_dict(self) -> Dict[str, float]:
        return {json_key: getattr(self, attr) for json_key, attr in _WEIGHT_KEYS.items()}

    def validate(self) -> "ScoringWeights":
        """Check every weight is in [0, 1] and the weights sum to 1.0.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: If a weight is out of range or the sum is off
        """
        for json_key, value in self.as_dict().items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"Scoring weight {json_key} must be a number, got {value!r}")
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"Scoring weight {json_key} must be between 0.0 and 1.0, got {value}")

        if abs(self.total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ConfigurationError(
                f"Scoring weights must sum to 1.0 (+/-{WEIGHT_SUM_TOLERANCE}), got {self.total:.4f} "
                f"(Coupling={self.coupling}, Complexity={self.complexity}, "
                f"TechDebt={self.tech_debt}, ExternalExposure={self.external_exposure})"
            )
        return self


@dataclass(frozen=True)
class ScoringConfig:
    """Everything read from a scoring configuration file."""

    weights: ScoringWeights = field(default_factory=ScoringWeights)
    filter: FilterConfiguration = field(default_factory=FilterConfiguration)
    max_workers: Optional[int] = DEFAULT_MAX_WORKERS


def _parse_weights(section: Any) -> ScoringWeights:
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{SCORING_WEIGHTS_SECTION}' must be an object")
    unknown = sorted(set(section) - set(_WEIGHT_KEYS))
    if unknown:
        raise ConfigurationError(f"Unknown scoring weight(s): {', '.join(unknown)}")
    missing = sorted(set(_WEIGHT_KEYS) - set(section))
    if missing:
        raise ConfigurationError(f"Missing scoring weight(s): {', '.join(missing)}")
    return ScoringWeights(**{attr: section[json_key] for json_key, attr in _WEIGHT_KEYS.items()}).validate()


def _parse_patterns(section: Dict[str, Any], key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    patterns = section.get(key)
    if patterns is None:
        return default
    if not isinstance(patterns, list):
        raise ConfigurationError(f"'{FILTER_SECTION}.{key}' must be a list of patterns")
    return tuple(patterns)


def _parse_filter(section: Any) -> FilterConfiguration:
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{FILTER_SECTION}' must be an object")
    return FilterConfiguration(
        block_list=_parse_patterns(section, "BlockList", DEFAULT_BLOCK_LIST),
        allow_list=_parse_patterns(section, "AllowList", ()),
    )


def _parse_max_workers(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"'{MAX_WORKERS_KEY}' must be a positive integer, got {value!r}")
    return value


def parse_scoring_config(data: Dict[str, Any]) -> ScoringConfig:
    """Build a ScoringConfig from already-parsed JSON data. Missing sections use defaults."""
    if not isinstance(data, dict):
        raise ConfigurationError("Scoring configuration must be a JSON object")

    if SCORING_WEIGHTS_SECTION in data:
        weights = _parse_weights(data[SCORING_WEIGHTS_SECTION])
    else:
        logger.info("No '%s' section, using default weights", SCORING_WEIGHTS_SECTION)
        weights = ScoringWeights()

    filter_config = _parse_filter(data[FILTER_SECTION]) if FILTER_SECTION in data else FilterConfiguration()
    return ScoringConfig(weights=weights, filter=filter_config, max_workers=_parse_max_workers(data.get(MAX_WORKERS_KEY)))


def load_scoring_config(path: Optional[str] = None) -> ScoringConfig:
    """Load scoring configuration from a JSON file.

    Args:
        path: Configuration file; None or a missing file yields the defaults

    Returns:
        Validated ScoringConfig

    Raises:
        ConfigurationError: If the file cannot be read, is not valid JSON or
            holds invalid values
    """
    if path is None or not os.path.exists(path):
        logger.info("Scoring configuration %s not found, using defaults", path)
        return ScoringConfig()

    logger.info("Loading scoring configuration from %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (IOError, OSError) as e:
        raise ConfigurationError(f"Failed to read scoring configuration {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    config = parse_scoring_config(data)
    logger.debug("Scoring weights: %s", config.weights.as_dict())
    return config
