"""Test to verify the project setup is working correctly."""

from hypothesis import given, strategies as st

import realm_launcher
from realm_launcher import models, services


def test_package_imports() -> None:
    """The package and its public modules import cleanly."""
    assert realm_launcher.__version__ == "0.1.0"
    assert "ServerProfile" in models.__all__
    assert "merge_directives" in services.__all__


@given(st.integers())
def test_hypothesis_setup(x: int) -> None:
    """Test that Hypothesis property-based testing works."""
    assert x + 0 == x
