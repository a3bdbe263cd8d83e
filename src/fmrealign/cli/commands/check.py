import argparse
import sys
import tomllib
from importlib import metadata
from pathlib import Path
from fmrealign import __version__

# Map package names to import names (for cases where they differ)
IMPORT_NAME_MAP: dict[str, str] = {}

# Dependencies that are functionally optional (won't fail check if missing)
OPTIONAL_DEPS: set[str] = set()


def _get_project_dependencies() -> list[str]:
    """Load required dependencies from pyproject.toml, or installed metadata."""
    pyproject_path = Path(__file__).parent.parent.parent.parent.parent / "pyproject.toml"

    if pyproject_path.exists():
        with open(pyproject_path, "rb") as f:
            config = tomllib.load(f)
        return config["project"]["dependencies"]

    requires = metadata.requires("fmrealign") or []
    return [req for req in requires if "extra ==" not in req]


def _extract_package_name(dep_spec: str) -> str:
    """Extract package name from dependency spec (e.g., 'numpy>=1.0' -> 'numpy')."""
    # Remove version specifiers and extras
    name = dep_spec.split(">")[0].split("<")[0].split("=")[0].split("[")[0].split(";")[0].strip()
    return name


def _get_import_name(package_name: str) -> str:
    """Get the import name for a package (handles special cases)."""
    return IMPORT_NAME_MAP.get(package_name, package_name)


def _check_dependency(package_name: str, import_name: str | None = None, optional: bool = False) -> bool:
    """
    Check if a dependency is available and print status.

    Returns True if available, False otherwise.
    """
    if import_name is None:
        import_name = _get_import_name(package_name)

    try:
        module = __import__(import_name)
        version = getattr(module, "__version__", "unknown")
        print(f"✓ {package_name}: {version}")
        return True
    except ImportError:
        symbol = "○" if optional else "✗"
        status = "not found (optional)" if optional else "NOT FOUND"
        print(f"{symbol} {package_name}: {status}")
        return optional


def cmd_check(args: argparse.Namespace) -> bool:
    """Runs environment checks. Returns True if all checks pass."""
    print("=" * 60)
    print("ENVIRONMENT CHECK")
    print("=" * 60)
    print(f"  Python:    {sys.version.split()[0]}")
    print(f"  fmrealign: {__version__}")
    print()

    all_ok = True
    for dep_spec in _get_project_dependencies():
        package_name = _extract_package_name(dep_spec)
        is_optional = package_name in OPTIONAL_DEPS
        ok = _check_dependency(package_name, _get_import_name(package_name), optional=is_optional)
        all_ok = all_ok and ok

    print()

    try:
        import fmrealign.realign  # noqa: F401
        print("✓ fmrealign.realign: available")
    except ImportError as e:
        print(f"✗ fmrealign.realign: NOT FOUND ({e})")
        all_ok = False

    print()

    if all_ok:
        print("  ✓ All required dependencies and modules available")
    else:
        print("  ✗ Some dependencies or modules missing - install with: pip install -e .")

    return all_ok
