"""Shared pytest fixtures for shapewire tests."""

import pytest

from shapewire import Container


@pytest.fixture()
def container() -> Container:
    """Fresh container per test."""
    return Container()
