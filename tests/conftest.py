"""
ssri - Test Configuration

Dynamic repo root discovery so tests run from any location, plus shared
payload fixtures.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest


def discover_repo_root() -> Path:
    """
    Discover the repository root using multiple strategies.

    Priority:
    1. SSRI_REPO_ROOT environment variable
    2. Git rev-parse --show-toplevel
    3. Path traversal from conftest.py location

    Returns:
        Path to repository root

    Raises:
        RuntimeError: If repo root cannot be discovered
    """
    # Strategy 1: Environment variable override
    env_root = os.environ.get("SSRI_REPO_ROOT")
    if env_root:
        root = Path(env_root)
        if root.is_dir() and (root / "pyproject.toml").is_file():
            return root

    # Strategy 2: Git rev-parse
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
            cwd=Path(__file__).parent,
        )
        git_root = Path(result.stdout.strip())
        if git_root.is_dir() and (git_root / "pyproject.toml").is_file():
            return git_root
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    # Strategy 3: Path traversal from conftest.py
    current = Path(__file__).resolve().parent
    for _ in range(10):  # Max 10 levels up
        if (current / "pyproject.toml").is_file() or (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            break
        current = parent

    raise RuntimeError(
        "Could not discover repo root. Set SSRI_REPO_ROOT environment variable "
        "or ensure tests are run from within the repository."
    )


REPO_ROOT = discover_repo_root()

# Make the package importable without installation
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

TEST_DATA = Path(__file__).read_bytes()


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """Fixture providing the repository root path."""
    return REPO_ROOT


@pytest.fixture(scope="session")
def test_data() -> bytes:
    """Payload used across tests: the bytes of this file."""
    return TEST_DATA


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    """Temporary file holding the test payload."""
    path = tmp_path / "payload.bin"
    path.write_bytes(TEST_DATA)
    return path

