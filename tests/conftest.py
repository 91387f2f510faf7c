"""Shared test fixtures for flask-apiparams."""

from __future__ import annotations

import pytest
from flask import Flask

from flask_apiparams.explorers import DefinitionRegistry
from flask_apiparams.providers import AnnotationsMetadataProvider, PydanticMetadataProvider


@pytest.fixture()
def app():
    """Minimal Flask app."""
    a = Flask(__name__)
    a.config["TESTING"] = True
    return a


@pytest.fixture()
def provider():
    return AnnotationsMetadataProvider()


@pytest.fixture()
def pydantic_provider():
    return PydanticMetadataProvider()


@pytest.fixture()
def definitions():
    return DefinitionRegistry()


@pytest.fixture()
def rename_class():
    """Temporarily rename a class; restores ``__name__`` on teardown.

    ``monkeypatch.setattr`` cannot undo a ``__name__`` patch on a class
    (it tries to ``delattr`` it), so the restore is done here instead.
    """
    originals = []

    def _rename(cls, name):
        originals.append((cls, cls.__name__))
        cls.__name__ = name

    yield _rename
    for cls, name in reversed(originals):
        cls.__name__ = name
