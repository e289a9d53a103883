"""Pytest configuration and fixtures for hocon package tests."""

import shutil
import tempfile
from pathlib import Path

import pytest

from dataknobs_hocon import (
    Array,
    Boolean,
    Concatenation,
    Config,
    Duration,
    Float32,
    Float64,
    Int,
    Object,
    String,
    Substitution,
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp)


@pytest.fixture
def typed_config():
    """Resolved config holding one value of each scalar kind."""
    return Config(
        Object(
            {
                "string": String("aa"),
                "int": Int(2),
                "int_string": String("3"),
                "float32": Float32(2.4),
                "float64": Float64(2.5),
                "float_string": String("3.2"),
                "true": Boolean(True),
                "on": String("on"),
                "maybe": String("maybe"),
                "timeout": Duration(5_000_000_000),
                "ints": Array([Int(1), Int(2)]),
                "mixed": Array([Int(1), String("c")]),
                "nested": Object({"b": String("c"), "e": Int(1)}),
            }
        )
    )


@pytest.fixture
def unresolved_root():
    """Document with substitutions, a concatenation and an object merge."""
    return Object(
        {
            "defaults": Object({"host": String("localhost"), "port": Int(8080)}),
            "server": Object(
                {
                    "host": Substitution("defaults.host"),
                    "url": Concatenation(
                        [
                            String("http://"),
                            Substitution("defaults.host"),
                            String(":"),
                            Substitution("defaults.port"),
                        ]
                    ),
                    "proxy": Substitution("proxy", optional=True),
                }
            ),
            "client": Concatenation(
                [Substitution("defaults"), Object({"port": Int(9090)})]
            ),
        }
    )
