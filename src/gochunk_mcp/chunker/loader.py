"""Load a Go project and its vendored dependencies as one corpus."""

import logging
import os
from typing import Optional

from ..diagnostics import Diagnostics
from ..errors import PackageLoadError, VendorPathError
from ..frontend.packages import CompilationUnit, LoadConfig, load_packages
from ..frontend.positions import PositionIndex

logger = logging.getLogger(__name__)


VENDOR_DIR_NAME = "vendor"

# Files listed per unit in the post-load summary
LISTED_FILES_PER_UNIT = 3


def vendor_dir(project_root: str) -> str:
    return os.path.join(project_root, VENDOR_DIR_NAME)


def resolve_vendor_path(project_root: str) -> str:
    """Absolute path of the vendored-dependency directory.

    Raises:
        VendorPathError: if the path cannot be made absolute.
    """
    try:
        return os.path.realpath(os.path.abspath(vendor_dir(project_root)))
    except (OSError, ValueError) as e:
        raise VendorPathError(
            f"failed to resolve absolute path for vendor directory under {project_root}: {e}"
        ) from e


def merge_units(*passes: list) -> list[CompilationUnit]:
    """Concatenate unit lists, keeping the first unit seen for each id."""
    merged = []
    seen = set()
    for units in passes:
        for unit in units:
            if unit.id in seen:
                continue
            seen.add(unit.id)
            merged.append(unit)
    return merged


def _run_pass(label: str, directory: str, positions: PositionIndex, diagnostics: Diagnostics,
              tests: bool) -> list[CompilationUnit]:
    logger.info(f"Loading packages from {label} ({directory})...")
    config = LoadConfig(dir=directory, positions=positions, tests=tests)
    try:
        units = load_packages(config, diagnostics)
    except PackageLoadError as e:
        diagnostics.warning(
            f"Loading {label} returned an error: {e}. Attempting to process available packages.",
            logger=logger,
            directory=directory,
        )
        units = e.units
    logger.info(f"Finished loading {len(units)} packages from {label}.")
    return units


def load_project(
    project_root: str,
    diagnostics: Optional[Diagnostics] = None,
    tests: bool = False,
) -> list[CompilationUnit]:
    """Load the project's own packages and its vendor tree.

    Two passes share one position index: the first is rooted at the project
    and the second at ``vendor/``. Units are de-duplicated by id with the
    first pass taking priority. Load errors are reported and the run carries
    on with whatever units were produced.

    Args:
        project_root: Module root directory (contains go.mod)
        diagnostics: Collector for recoverable conditions
        tests: Include _test.go files

    Returns:
        Unique compilation units, project packages first.

    Raises:
        VendorPathError: if the vendor directory path cannot be resolved.
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
    resolve_vendor_path(project_root)
    vendor_path = vendor_dir(project_root)

    if not os.path.exists(vendor_path):
        diagnostics.warning(
            f"Vendor directory does NOT exist at {vendor_path}. "
            "Run 'go mod vendor' in the project root to include dependency code.",
            logger=logger,
            path=vendor_path,
        )
    elif not os.path.isdir(vendor_path):
        diagnostics.warning(f"Vendor path {vendor_path} is not a directory.", logger=logger, path=vendor_path)
    else:
        logger.info(f"Vendor directory EXISTS at {vendor_path}.")

    positions = PositionIndex()
    main_units = _run_pass("main module", project_root, positions, diagnostics, tests)
    vendor_units = _run_pass("vendor directory", vendor_path, positions, diagnostics, tests)

    units = merge_units(main_units, vendor_units)
    logger.info(f"Total unique packages loaded: {len(units)}")
    log_loaded_units(units)
    return units


def log_loaded_units(units: list) -> None:
    logger.info("--- Loaded packages (main module + vendor) ---")
    for unit in units:
        logger.info(f"Package ID: {unit.id}")
        files = unit.go_files
        if not files:
            logger.info("  No Go files found for this package.")
            continue
        for path in files[:LISTED_FILES_PER_UNIT]:
            logger.info(f"  File: {path}")
        if len(files) > LISTED_FILES_PER_UNIT:
            logger.info(f"  ...and {len(files) - LISTED_FILES_PER_UNIT} more files.")
