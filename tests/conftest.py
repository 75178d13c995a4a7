"""Pytest configuration and fixtures."""

import json

import pytest


@pytest.fixture
def sample_manifest():
    """package.json for a project with one conflicting transitive dependency."""
    return {
        "name": "sample-app",
        "version": "1.0.0",
        "dependencies": {
            "A": "^1.0.0",
            "B": "^1.0.0",
        },
    }


@pytest.fixture
def sample_lock():
    """package-lock.json (v1): lib@1.2.0 hoisted, lib@2.0.0 nested under B > C."""
    return {
        "name": "sample-app",
        "version": "1.0.0",
        "lockfileVersion": 1,
        "requires": True,
        "dependencies": {
            "A": {
                "version": "1.0.0",
                "requires": {"lib": "^1.0.0"},
            },
            "B": {
                "version": "1.0.0",
                "requires": {"C": "^1.0.0"},
                "dependencies": {
                    "C": {
                        "version": "1.0.0",
                        "requires": {"lib": "^2.0.0"},
                        "dependencies": {
                            "lib": {"version": "2.0.0"},
                        },
                    },
                },
            },
            "lib": {"version": "1.2.0"},
        },
    }


@pytest.fixture
def sample_lock_v3():
    """The same install as sample_lock, in lockfileVersion 3 layout."""
    return {
        "name": "sample-app",
        "version": "1.0.0",
        "lockfileVersion": 3,
        "requires": True,
        "packages": {
            "": {
                "name": "sample-app",
                "version": "1.0.0",
                "dependencies": {"A": "^1.0.0", "B": "^1.0.0"},
            },
            "node_modules/A": {
                "version": "1.0.0",
                "dependencies": {"lib": "^1.0.0"},
            },
            "node_modules/B": {
                "version": "1.0.0",
                "dependencies": {"C": "^1.0.0"},
            },
            "node_modules/B/node_modules/C": {
                "version": "1.0.0",
                "dependencies": {"lib": "^2.0.0"},
            },
            "node_modules/B/node_modules/C/node_modules/lib": {
                "version": "2.0.0",
            },
            "node_modules/lib": {"version": "1.2.0"},
        },
    }


@pytest.fixture
def write_project(tmp_path):
    """Write package.json and package-lock.json into a temporary directory."""

    def _write(manifest, lock):
        (tmp_path / "package.json").write_text(json.dumps(manifest))
        (tmp_path / "package-lock.json").write_text(json.dumps(lock))
        return tmp_path

    return _write
