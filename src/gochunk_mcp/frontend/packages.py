"""Package discovery and loading with ``./...`` semantics."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..errors import PackageLoadError
from .checker import TypeInfo, check_packages
from .positions import PositionIndex
from .syntax import SourceFile, iter_import_specs, package_clause_name, parse_go

logger = logging.getLogger(__name__)


GO_MOD_FILE = "go.mod"

# Directories the go tool never descends into for ./...
SKIP_DIR_NAMES = ("vendor", "testdata")

_MODULE_DIRECTIVE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)
_IGNORE_CONSTRAINT = re.compile(r"^//\s*(go:build|\+build)\s+ignore\s*$")


@dataclass
class LoadConfig:
    """Options for one load pass."""
    dir: str                        # Root directory of the pass
    positions: PositionIndex        # Shared across passes
    tests: bool = False             # Include _test.go files


@dataclass
class CompilationUnit:
    """One Go package after parsing and type-checking."""
    id: str                         # Stable identity (the import path)
    name: str                       # Declared package name
    pkg_path: str                   # Import path
    dir: str                        # Absolute package directory
    files: list[SourceFile] = field(default_factory=list)
    positions: Optional[PositionIndex] = None
    type_info: Optional[TypeInfo] = None
    errors: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)

    @property
    def go_files(self) -> list[str]:
        return [f.path for f in self.files]


def read_module_path(root: Path) -> Optional[str]:
    """Module path declared by ``root/go.mod``, if any."""
    go_mod = root / GO_MOD_FILE
    if not go_mod.is_file():
        return None
    try:
        text = go_mod.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    match = _MODULE_DIRECTIVE.search(text)
    return match.group(1) if match else None


def should_skip_dir(name: str) -> bool:
    return name in SKIP_DIR_NAMES or name.startswith(".") or name.startswith("_")


def should_skip_file(name: str, tests: bool = False) -> bool:
    if not name.endswith(".go"):
        return True
    if name.startswith(".") or name.startswith("_"):
        return True
    if name.endswith("_test.go") and not tests:
        return True
    return False


def is_ignored(content: bytes) -> bool:
    """True if the file carries an ``ignore`` build constraint.

    Constraints must appear before the package clause, among comments and
    blank lines.
    """
    for raw_line in content.splitlines():
        line = raw_line.decode("utf-8", errors="replace").strip()
        if not line:
            continue
        if not line.startswith("//"):
            return False
        if _IGNORE_CONSTRAINT.match(line):
            return True
    return False


def load_packages(config: LoadConfig, diagnostics) -> list[CompilationUnit]:
    """Load every package under ``config.dir``.

    In module mode (``go.mod`` present) import paths are the module path plus
    the relative directory, and vendored packages reachable through imports
    are loaded as well. Otherwise import paths are the directories relative to
    the root, which is how a ``vendor`` tree is laid out.

    Raises:
        PackageLoadError: if the root is missing or the walk failed. The
            units produced so far are on the exception.
    """
    root = Path(config.dir)
    if not root.is_dir():
        raise PackageLoadError(f"directory not found: {config.dir}")

    module_path = read_module_path(root)
    walk_errors: list[str] = []

    def on_error(err: OSError):
        walk_errors.append(f"{err.filename}: {err.strerror or err}")

    units: list[CompilationUnit] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        current = Path(dirpath)
        dirnames[:] = sorted(
            d for d in dirnames
            if not should_skip_dir(d) and not (module_path and (current / d / GO_MOD_FILE).is_file())
        )
        rel = current.relative_to(root).as_posix()
        if module_path:
            pkg_path = module_path if rel == "." else f"{module_path}/{rel}"
        else:
            pkg_path = rel if rel != "." else root.name
        unit = _load_dir(current, pkg_path, sorted(filenames), config, diagnostics)
        if unit is not None:
            units.append(unit)

    if module_path:
        units.extend(_load_vendored_imports(root / "vendor", units, config, diagnostics))

    check_packages(units, diagnostics)
    for unit in units:
        for error in unit.errors:
            diagnostics.warning(f"{unit.id}: {error}", logger=logger, package=unit.id)

    if walk_errors:
        raise PackageLoadError("; ".join(walk_errors), units)
    return units


def _load_vendored_imports(vendor_root: Path, units: list, config: LoadConfig, diagnostics) -> list[CompilationUnit]:
    """Vendored packages reachable from ``units`` through imports."""
    if not vendor_root.is_dir():
        return []
    loaded = {u.pkg_path for u in units}
    pending = [path for u in units for path in u.imports]
    found: list[CompilationUnit] = []
    while pending:
        import_path = pending.pop(0)
        if import_path in loaded:
            continue
        loaded.add(import_path)
        directory = vendor_root / import_path
        if not directory.is_dir():
            continue
        try:
            filenames = sorted(os.listdir(directory))
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
            continue
        unit = _load_dir(directory, import_path, filenames, config, diagnostics)
        if unit is not None:
            found.append(unit)
            pending.extend(unit.imports)
    return found


def _load_dir(directory: Path, pkg_path: str, filenames: list, config: LoadConfig, diagnostics) -> Optional[CompilationUnit]:
    """Parse the Go files of one directory into a unit, or None if it has none."""
    unit: Optional[CompilationUnit] = None
    errors: list[str] = []

    for name in filenames:
        if should_skip_file(name, config.tests):
            continue
        path = directory / name
        if not path.is_file():
            continue
        try:
            content = path.read_bytes()
        except OSError as e:
            errors.append(f"cannot read {path}: {e}")
            continue
        if is_ignored(content):
            continue

        abs_path = str(path.resolve())
        token_file = config.positions.add_file(abs_path, content)
        tree = parse_go(content)
        package_name = package_clause_name(tree.root_node)
        if not package_name:
            errors.append(f"expected 'package' clause in {abs_path}")
            continue

        if unit is None:
            unit = CompilationUnit(
                id=pkg_path,
                name=package_name,
                pkg_path=pkg_path,
                dir=str(directory.resolve()),
                positions=config.positions,
            )
        elif package_name != unit.name:
            errors.append(f"found packages {unit.name} and {package_name} in {directory}; dropping {name}")
            continue

        if tree.root_node.has_error:
            errors.append(f"syntax error in {abs_path}")
        source_file = SourceFile(path=abs_path, tree=tree, token_file=token_file, package_name=package_name)
        unit.files.append(source_file)
        for spec in iter_import_specs(tree.root_node):
            if spec.path not in unit.imports:
                unit.imports.append(spec.path)

    if unit is None:
        if errors:
            diagnostics.warning(
                f"No loadable Go files in {directory}: {'; '.join(errors)}",
                logger=logger,
                directory=str(directory),
            )
        return None
    unit.errors.extend(errors)
    return unit
