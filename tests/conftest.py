"""
Pytest configuration and fixtures for Vertica native file reader tests.
"""

import logging
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.setup.generate_test_data import NativeFileBuilder  # noqa: E402

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Keep the environment from leaking render defaults into tests
for _var in ("VNPARSER_TZ_OFFSET", "VNPARSER_HEX_PREFIX", "VNPARSER_PARQUET_ROW_GROUP_SIZE"):
    os.environ.pop(_var, None)


@pytest.fixture
def temp_output_dir(tmp_path):
    """Provide temporary directory for test outputs."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def native_builder():
    """Factory for NativeFileBuilder instances."""
    def make(types_text, widths=None):
        return NativeFileBuilder(types_text, widths=widths)

    return make


@pytest.fixture
def write_native_file(tmp_path):
    """Write a builder's bytes plus its types file into tmp_path; returns (bin_path, types_path)."""
    def write(builder, name="data"):
        bin_path = tmp_path / f"{name}.bin"
        types_path = tmp_path / f"{name}.types"
        builder.write(bin_path)
        types_path.write_text(builder.types_text, encoding="utf-8")
        return bin_path, types_path

    return write


@pytest.fixture
def basic_file(native_builder, write_native_file):
    """Integer/Varchar/Boolean file with two row groups (3 rows, one with NULLs)."""
    builder = native_builder("Integer/IntCol\nVarchar/Name\nBoolean/Flag\n")
    builder.add_group([42, "ab", True], [None, "x,y", False])
    builder.add_group([-7, None, None])
    return write_native_file(builder, "basic")


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "slow: marks slow tests")
    config.addinivalue_line("markers", "datatypes: marks data type specific tests")
    config.addinivalue_line("markers", "e2e: marks command line tests")
