"""Tests for the package layout."""

import importlib

import pytest


class TestNamespacePackages:
    """backoffice and backoffice.infrastructure carry no __init__ module."""

    @pytest.mark.parametrize("name", ["backoffice", "backoffice.infrastructure"])
    def test_namespace(self, name: str) -> None:
        """The package resolves as a namespace package."""
        module = importlib.import_module(name)
        assert getattr(module, "__file__", None) is None
        assert list(module.__path__)

    @pytest.mark.parametrize(
        "name",
        [
            "backoffice.infrastructure.config",
            "backoffice.infrastructure.database",
            "backoffice.infrastructure.logging",
            "backoffice.infrastructure.memory",
            "backoffice.infrastructure.models",
            "backoffice.infrastructure.repositories",
            "backoffice.infrastructure.storage",
            "backoffice.main",
        ],
    )
    def test_modules_import(self, name: str) -> None:
        """Modules under the namespace import normally."""
        assert importlib.import_module(name).__name__ == name
