"""
Shared fixtures for adapter tests.
"""

import os
import tempfile
from types import SimpleNamespace

import pytest


def make_model(*ptypes: str) -> dict:
    """Build a policy model declaring the given rule types.

    Mirrors the engine's shape: model[section][ptype].policy.
    """
    model: dict = {}
    for ptype in ptypes or ("p", "g"):
        model.setdefault(ptype[0], {})[ptype] = SimpleNamespace(policy=[])
    return model


@pytest.fixture
def db_path():
    """Path to a SQLite file in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.join(tmpdir, "policy.db")


@pytest.fixture
def new_model():
    """Factory for empty policy models."""
    return make_model
