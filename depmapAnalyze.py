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
"""
Project Dependency Map Analyzer

Analyzes one or more solutions (aggregates of build projects and their
project references) for architectural problems: circular dependency chains
and projects that are hard to extract into independent services.

USAGE:
    python3 depmapAnalyze.py <input.json> [options]

EXAMPLES:
    # Full analysis: cycles, cycle-breaking suggestions and extraction scores
    python3 depmapAnalyze.py analysis-input.json

    # Only circular dependencies and cycle-breaking suggestions
    python3 depmapAnalyze.py analysis-input.json --cycles-only

    # Custom scoring weights and framework filter
    python3 depmapAnalyze.py analysis-input.json --config scoring-config.json

    # Score projects on 4 worker threads, show top 20
    python3 depmapAnalyze.py analysis-input.json --max-workers 4 --top 20

METHOD:
    Reads pre-resolved solution data (projects, references, target frameworks,
    complexity, endpoint counts and method call counts) and:
    - Merges all solutions into one dependency graph
    - Detects cycles with Tarjan's strongly connected components
    - Finds the weakest-coupled edge of every cycle and ranks them globally
    - Scores every project's extraction difficulty (0-100) from coupling,
      complexity, tech debt and external API exposure
"""

import sys
import logging
import argparse
from typing import List

from depmap.color_utils import (
    Colors,
    colored,
    format_table_row,
    get_coupling_color,
    get_difficulty_color,
    print_error,
    print_success,
    print_warning,
    should_use_color,
)
from depmap.constants import (
    DEFAULT_SCORING_CONFIG,
    DEFAULT_TOP_N,
    EXIT_INVALID_ARGS,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    MAX_CYCLE_MEMBERS_DISPLAY,
    MAX_CYCLES_DISPLAY,
    DepMapError,
    ValidationError,
)
from depmap.coupling_analyzer import classify_coupling_strength
from depmap.cycle_detector import CycleInfo
from depmap.cycle_statistics import CycleStatistics
from depmap.dataset_loader import load_analysis_input
from depmap.extraction_scoring import ExtractionScore, RankedExtractionCandidates
from depmap.metric_types import describe_metric
from depmap.package_verification import require_packages
from depmap.pipeline import AnalysisResults, run_analysis
from depmap.recommendations import CycleBreakingSuggestion
from depmap.scoring_config import load_scoring_config

logger = logging.getLogger(__name__)


def print_header(title: str) -> None:
    print(f"\n{Colors.BRIGHT}{'=' * 80}{Colors.RESET}")
    print(f"{Colors.BRIGHT}{title}{Colors.RESET}")
    print(f"{Colors.BRIGHT}{'=' * 80}{Colors.RESET}")


def print_cycle_statistics(statistics: CycleStatistics) -> None:
    print_header("CIRCULAR DEPENDENCY SUMMARY")
    print(f"  Projects analyzed:        {statistics.total_projects_analyzed}")
    print(f"  Circular chains:          {statistics.total_cycles}")
    print(f"  Projects in cycles:       {statistics.total_projects_in_cycles} ({statistics.participation_rate:.1f}%)")
    print(f"  Largest cycle:            {statistics.largest_cycle_size}")
    if statistics.total_cycles:
        print(f"  Average / median size:    {statistics.average_cycle_size:.1f} / {statistics.median_cycle_size:.1f}")


def print_cycles(cycles: List[CycleInfo]) -> None:
    if not cycles:
        print(f"\n{Colors.GREEN}✓ No circular dependencies found{Colors.RESET}")
        return

    print(f"\n{Colors.RED}Found {len(cycles)} circular dependency chain(s):{Colors.RESET}\n")
    for cycle in sorted(cycles, key=lambda c: (-c.cycle_size, c.cycle_id))[:MAX_CYCLES_DISPLAY]:
        label = "self-reference" if cycle.has_self_loop else f"{cycle.cycle_size} projects"
        print(f"{Colors.RED}Cycle {cycle.cycle_id} ({label}):{Colors.RESET}")
        for project in cycle.projects[:MAX_CYCLE_MEMBERS_DISPLAY]:
            print(f"  • {project.name}  {Colors.DIM}[{project.solution}]{Colors.RESET}")
        if cycle.cycle_size > MAX_CYCLE_MEMBERS_DISPLAY:
            print(f"  {Colors.DIM}... and {cycle.cycle_size - MAX_CYCLE_MEMBERS_DISPLAY} more{Colors.RESET}")
    if len(cycles) > MAX_CYCLES_DISPLAY:
        print(f"{Colors.DIM}... and {len(cycles) - MAX_CYCLES_DISPLAY} more cycles{Colors.RESET}")


def print_recommendations(recommendations: List[CycleBreakingSuggestion], top: int) -> None:
    print_header("CYCLE-BREAKING RECOMMENDATIONS")
    if not recommendations:
        print("  No recommendations (no cycles with analyzable edges)")
        return

    widths = [5, 30, 30, 9]
    print(f"{Colors.BRIGHT}{format_table_row(['Rank', 'Remove reference from', 'To', 'Calls'], widths)}{Colors.RESET}")
    for suggestion in recommendations[:top]:
        color = get_coupling_color(classify_coupling_strength(suggestion.coupling_score).value)
        print(
            format_table_row(
                [f"#{suggestion.rank}", suggestion.source.name, suggestion.target.name, suggestion.coupling_score],
                widths,
                ["", "", "", color],
            )
        )
        print(f"      {Colors.DIM}{suggestion.rationale}{Colors.RESET}")
    if len(recommendations) > top:
        print(f"{Colors.DIM}... and {len(recommendations) - top} more{Colors.RESET}")


def _print_score_rows(scores: List[ExtractionScore]) -> None:
    widths = [32, 7, 8, 12, 12, 12, 12]
    print(f"{Colors.BRIGHT}{format_table_row(['Project', 'Score', 'Level', 'Coupling', 'Complexity', 'TechDebt', 'API'], widths)}{Colors.RESET}")
    for score in scores:
        category = score.difficulty_category.value
        color, style = get_difficulty_color(category)
        row = format_table_row(
            [
                score.project_name,
                f"{score.final_score:.1f}",
                category,
                describe_metric(score.coupling_metric),
                describe_metric(score.complexity_metric),
                describe_metric(score.tech_debt_metric),
                describe_metric(score.external_api_metric),
            ],
            widths,
        )
        print(colored(row, color, style))


def print_extraction_candidates(ranked: RankedExtractionCandidates, top: int) -> None:
    stats = ranked.statistics
    print_header("EXTRACTION DIFFICULTY")
    print(f"  Projects scored:  {stats.total_projects} (average {stats.average_score:.1f})")
    print(f"  {colored('Easy', Colors.GREEN)}: {stats.easy_count}   {colored('Medium', Colors.YELLOW)}: {stats.medium_count}   {colored('Hard', Colors.RED)}: {stats.hard_count}")

    if ranked.easiest_candidates:
        print(f"\n{Colors.BRIGHT}Easiest extraction candidates:{Colors.RESET}")
        _print_score_rows(ranked.easiest_candidates[:top])
    if ranked.hardest_candidates:
        print(f"\n{Colors.BRIGHT}Hardest extraction candidates:{Colors.RESET}")
        _print_score_rows(ranked.hardest_candidates[:top])

    fallbacks = sum(1 for score in ranked.all_projects if score.fallback_metrics)
    if fallbacks:
        print_warning(f"{fallbacks} project(s) use neutral fallback scores for missing data (run with --verbose for details)", prefix=False)


def print_results(results: AnalysisResults, top: int, cycles_only: bool) -> None:
    report = results.build_report
    print_success(
        f"Analyzed {results.graph.vertex_count} projects and {results.graph.edge_count} references "
        f"({len(results.graph.cross_solution_edges())} cross-solution)",
        prefix=False,
    )
    if report.dangling_references:
        print_warning(f"{len(report.dangling_references)} reference(s) to unloaded projects were skipped", prefix=False)

    print_cycle_statistics(results.statistics)
    print_cycles(results.cycles)
    print_recommendations(results.recommendations, top)

    if not cycles_only and results.ranked_candidates is not None:
        print_extraction_candidates(results.ranked_candidates, top)


def main() -> int:
    """Main entry point for the dependency map analyzer.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    parser = argparse.ArgumentParser(
        description="Analyze project dependency graphs for cycles and extraction difficulty",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s analysis-input.json
  %(prog)s analysis-input.json --cycles-only
  %(prog)s analysis-input.json --config scoring-config.json
  %(prog)s analysis-input.json --max-workers 4 --top 20
        """,
    )
    parser.add_argument("input", help="Analysis input JSON (solutions, projects, references and measurements)")
    parser.add_argument("--config", metavar="FILE", default=DEFAULT_SCORING_CONFIG, help=f"Scoring configuration file (default: {DEFAULT_SCORING_CONFIG})")
    parser.add_argument("--top", type=int, default=DEFAULT_TOP_N, help=f"Number of recommendations and candidates to display (default: {DEFAULT_TOP_N})")
    parser.add_argument("--max-workers", type=int, metavar="N", help="Score projects on N worker threads (default: sequential)")
    parser.add_argument("--cycles-only", action="store_true", help="Only analyze circular dependencies, skip extraction scoring")
    parser.add_argument("--no-framework-filter", action="store_true", help="Keep references into framework projects")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")

    if not should_use_color(args.no_color):
        Colors.disable()

    require_packages("dependency map analysis")

    try:
        if args.top < 1:
            raise ValidationError(f"--top must be positive, got {args.top}")
        if args.max_workers is not None and args.max_workers < 1:
            raise ValidationError(f"--max-workers must be positive, got {args.max_workers}")

        config = load_scoring_config(args.config)
        analysis_input = load_analysis_input(args.input)
        results = run_analysis(
            analysis_input,
            config=config,
            filter_frameworks=not args.no_framework_filter,
            include_extraction_scores=not args.cycles_only,
            max_workers=args.max_workers,
        )
        print_results(results, args.top, args.cycles_only)
        return EXIT_SUCCESS

    except ValidationError as e:
        # User fixable: bad input file, bad configuration, bad arguments
        logging.error("Validation error: %s", e)
        print_error(str(e))
        return EXIT_INVALID_ARGS

    except DepMapError as e:
        logging.error("Analysis error: %s", e)
        print_error(str(e))
        print_warning("Run with --verbose for more details", prefix=False)
        return e.exit_code


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print_warning("\nInterrupted by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except ImportError as e:
        logging.error("Missing dependency: %s", e)
        sys.exit(EXIT_RUNTIME_ERROR)
