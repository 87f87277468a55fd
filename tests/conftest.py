"""Shared fixtures for the generator tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


BLOG_SCHEMA = """\
syntax = "proto3";

package blog;

// A registered author
message Author {
  string name = 1;
  string email = 2;
  bool active = 3;
}

message Post {
  string title = 1;
  Author author = 2;
  repeated string tags = 3;
  double rating = 4;
  int64 views = 5;
}

message Empty {}
"""


@pytest.fixture
def write_schema(tmp_path: Path) -> Callable[[str], Path]:
    """Return a callable that writes schema text to a .proto file."""
    def _write(text: str, name: str = "schema.proto") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def blog_schema(write_schema) -> Path:
    return write_schema(BLOG_SCHEMA, "blog.proto")
