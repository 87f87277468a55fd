"""Exception types raised by the generator.

Every failure the pipeline can hit derives from ``GeneratorError`` so the
CLI can report it with a single handler. None of these are retried.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all generator failures."""


class SchemaReadError(GeneratorError):
    """The schema file is missing or cannot be read."""


class SchemaSyntaxError(GeneratorError):
    """The schema text does not follow the message grammar."""

    def __init__(
        self, message: str, line: int, column: int, source: str = "<schema>",
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.source = source
        super().__init__(f"{source}:{line}:{column}: {message}")


class UnresolvedReferenceError(GeneratorError):
    """A field references a message type that is not defined."""

    def __init__(self, references: list[str]) -> None:
        self.references = references
        super().__init__(
            "unresolved message references: " + ", ".join(references)
        )


class DirectoryCreationError(GeneratorError):
    """An output directory could not be created."""


class TemplateError(GeneratorError):
    """A template could not be loaded."""


class TemplateSyntaxError(TemplateError):
    """A template's own text is malformed."""


class RenderError(TemplateError):
    """Applying the context to a template failed."""


class FileCreationError(GeneratorError):
    """An output file could not be created or written."""
