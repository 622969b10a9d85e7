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
"""Shared constants for depmap tools.

This module provides centralized constants used across the depmap analysis
stages to keep thresholds, defaults and exit codes in one place.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# Coupling Strength Constants
# =============================================================================

# Method call counts between two projects
WEAK_COUPLING_MAX_CALLS = 5  # At or below this = weak coupling
MEDIUM_COUPLING_MAX_CALLS = 20  # At or below this = medium coupling
# Above MEDIUM_COUPLING_MAX_CALLS = strong coupling

# Fallback when the call-analysis collaborator has no data for an edge
MISSING_CALL_COUNT_SCORE = 0

# =============================================================================
# Extraction Scoring Constants
# =============================================================================

NORMALIZED_SCORE_MIN = 0.0
NORMALIZED_SCORE_MAX = 100.0

# Difficulty categories (inclusive upper bounds)
EASY_MAX_SCORE = 33.0
MEDIUM_MAX_SCORE = 66.0

# Coupling metric: incoming edges weigh double because consumers block extraction
INCOMING_COUPLING_WEIGHT = 2
OUTGOING_COUPLING_WEIGHT = 1

# Complexity bands (average cyclomatic complexity per method)
LOW_COMPLEXITY_THRESHOLD = 7.0
MEDIUM_COMPLEXITY_THRESHOLD = 15.0
HIGH_COMPLEXITY_THRESHOLD = 25.0
VERY_HIGH_COMPLEXITY_RANGE = 10.0
COMPLEXITY_FALLBACK_SCORE = 50.0

# Tech debt fallback for unknown or missing target frameworks
TECH_DEBT_FALLBACK_SCORE = 50.0

# External API exposure steps (endpoint counts, inclusive upper bounds)
LOW_API_EXPOSURE_MAX = 5
MEDIUM_API_EXPOSURE_MAX = 15
EXTERNAL_API_FALLBACK_SCORE = 0.0

# Default scoring weights (must sum to 1.0)
DEFAULT_COUPLING_WEIGHT = 0.40
DEFAULT_COMPLEXITY_WEIGHT = 0.30
DEFAULT_TECH_DEBT_WEIGHT = 0.20
DEFAULT_EXTERNAL_EXPOSURE_WEIGHT = 0.10
WEIGHT_SUM_TOLERANCE = 0.01

# =============================================================================
# Display Limits
# =============================================================================

DEFAULT_TOP_N = 10  # Default number of recommendations / candidates to show
MAX_CYCLES_DISPLAY = 20  # Maximum cycles to display
MAX_CYCLE_MEMBERS_DISPLAY = 15  # Maximum members listed per cycle
RANKED_CANDIDATE_LIMIT = 10  # Easiest / hardest extraction candidates kept

# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_SCORING_CONFIG = "scoring-config.json"
SCORING_WEIGHTS_SECTION = "ScoringWeights"
FILTER_SECTION = "Filter"
MAX_WORKERS_KEY = "MaxWorkers"

# Parallel processing
DEFAULT_MAX_WORKERS = None  # None = sequential extraction scoring

# =============================================================================
# Exception Classes
# =============================================================================


class DepMapError(Exception):
    """Base exception for all depmap errors.

    All depmap exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(DepMapError):
    """Raised when an input invariant is violated (null graph, malformed identity, negative weight)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ConfigurationError(ValidationError):
    """Raised when scoring or filter configuration is invalid."""


# Analysis/processing errors (EXIT_RUNTIME_ERROR)
class AnalysisError(DepMapError):
    """Raised when analysis or processing operations fail."""


class GraphBuildError(AnalysisError):
    """Raised when dependency graph construction or mutation fails."""


class OperationCancelledError(DepMapError):
    """Raised when a cooperative cancellation request is observed."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message, EXIT_KEYBOARD_INTERRUPT)
