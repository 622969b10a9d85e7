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
"""Runtime dependency verification for depmap.

Minimum versions cover the APIs the analysis relies on: networkx.freeze and
insertion-ordered DiGraph views, numpy median/mean on plain lists, and
packaging.version for the comparison itself.
"""

import sys
import logging
import argparse
from importlib.metadata import PackageNotFoundError, version
from typing import Dict, List, Optional, Tuple

from packaging.version import parse

from depmap.color_utils import print_error, print_success
from depmap.constants import EXIT_RUNTIME_ERROR

logger = logging.getLogger(__name__)

PACKAGE_REQUIREMENTS: Dict[str, str] = {
    "networkx": "2.8.8",
    "numpy": "1.24.0",
    "colorama": "0.4.6",
    "packaging": "24.0",
}


def check_package_version(package_name: str, min_version: Optional[str] = None, raise_on_error: bool = True) -> Tuple[bool, bool, Optional[str]]:
    """Check that a package is installed and meets its minimum version.

    Args:
        package_name: Distribution name (e.g. 'networkx')
        min_version: Minimum version; defaults to PACKAGE_REQUIREMENTS
        raise_on_error: If True, raise ImportError on a missing or outdated package

    Returns:
        Tuple of (is_installed, meets_version, installed_version)

    Raises:
        ValueError: If no minimum version is known for the package
        ImportError: If raise_on_error is True and the check fails
    """
    if min_version is None:
        min_version = PACKAGE_REQUIREMENTS.get(package_name)
        if min_version is None:
            raise ValueError(f"No version requirement specified for {package_name}")

    try:
        installed_version = version(package_name)
    except PackageNotFoundError as exc:
        if raise_on_error:
            raise ImportError(f"{package_name} is not installed. Install with: pip install '{package_name}>={min_version}'") from exc
        return False, False, None

    meets_version = parse(installed_version) >= parse(min_version)
    if not meets_version and raise_on_error:
        raise ImportError(
            f"{package_name} {installed_version} is too old. "
            f"Version >={min_version} is required. "
            f"Upgrade with: pip install --upgrade '{package_name}>={min_version}'"
        )
    return True, meets_version, installed_version


def find_missing_packages() -> List[str]:
    """Human-readable problems for every requirement that is not met (empty when all are)."""
    problems = []
    for package_name, min_version in PACKAGE_REQUIREMENTS.items():
        is_installed, meets_version, installed_version = check_package_version(package_name, min_version, raise_on_error=False)
        if not is_installed:
            problems.append(f"{package_name} not installed (need >={min_version})")
        elif not meets_version:
            problems.append(f"{package_name} {installed_version} (need >={min_version})")
        else:
            logger.debug("%s %s OK", package_name, installed_version)
    return problems


def require_packages(context: str = "depmap") -> None:
    """Exit with EXIT_RUNTIME_ERROR if any runtime dependency is missing or too old."""
    problems = find_missing_packages()
    if not problems:
        return
    for problem in problems:
        print_error(f"{problem} - required for {context}")
    requirements = " ".join(f"'{name}>={ver}'" for name, ver in PACKAGE_REQUIREMENTS.items())
    print(f"Install with: pip install {requirements}", file=sys.stderr)
    sys.exit(EXIT_RUNTIME_ERROR)


def check_all_packages() -> bool:
    """Print the status of every runtime dependency. Returns True when all are OK."""
    print("depmap package verification")
    print("=" * 40)

    problems = find_missing_packages()
    for package_name in PACKAGE_REQUIREMENTS:
        problem = next((p for p in problems if p.startswith(package_name + " ")), None)
        if problem is None:
            _, _, installed_version = check_package_version(package_name, raise_on_error=False)
            print_success(f"{package_name} {installed_version}")
        else:
            print_error(problem, prefix=False)

    print("=" * 40)
    if problems:
        print_error("Some required packages are missing or too old", prefix=False)
        return False
    print_success("All required packages are available")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify depmap package dependencies")
    parser.add_argument("--check-all", action="store_true", help="Check all runtime packages")
    args = parser.parse_args()

    if args.check_all:
        return 0 if check_all_packages() else 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
