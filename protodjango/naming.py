"""Derive app names, titles and route segments.

Examples:
  generated/accounts  -> app name "accounts", title "Accounts"
  out/my_app/         -> app name "my_app",   title "My_app"
  out/blog-api        -> app name "blog-api", title "Blog-Api"
  BlogPost            -> route segment "blogpost"
"""

from __future__ import annotations

import keyword
import re
from pathlib import Path

_WORD_RE = re.compile(r"\w+")


def app_name_from_path(output_dir: str | Path) -> str:
    """Return the final path segment of the output directory."""
    path = Path(output_dir)
    return path.name or path.resolve().name


def title_case(name: str) -> str:
    """Uppercase the first letter of each word and lowercase the rest.

    Underscores join words rather than separating them; non-ASCII
    letters are word characters.
    """
    return _WORD_RE.sub(lambda m: m.group(0).capitalize(), name)


def to_lower(name: str) -> str:
    """Route segment for a message name."""
    return name.lower()


def is_python_identifier(name: str) -> bool:
    """Check that a name can be used as a Python identifier."""
    return name.isidentifier() and not keyword.iskeyword(name)
