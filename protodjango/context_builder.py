"""Build the Jinja2 template context from parsed schema messages.

Maps every field through the TypeMapper, derives the app name and title
from the output directory, and checks custom field types against the set
of parsed message names.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from .errors import UnresolvedReferenceError
from .logging_config import get_logger
from .naming import app_name_from_path, is_python_identifier, title_case
from .schema_parser import SchemaMessage
from .type_mapper import TypeMapper

logger = get_logger(__name__)


@dataclass(frozen=True)
class MappedField:
    name: str
    type: str
    repeated: bool
    framework_type: str


@dataclass(frozen=True)
class GeneratedMessage:
    name: str
    fields: tuple[MappedField, ...] = ()


@dataclass(frozen=True)
class RenderContext:
    """Read-only context shared by every template."""

    app_name: str
    app_title: str
    messages: tuple[GeneratedMessage, ...] = ()

    def template_vars(self) -> dict[str, Any]:
        return {
            "app_name": self.app_name,
            "app_title": self.app_title,
            "messages": self.messages,
        }


def map_message(message: SchemaMessage, mapper: TypeMapper) -> GeneratedMessage:
    """Attach a framework declaration to each field of a message."""
    fields = tuple(
        MappedField(
            name=field.name,
            type=field.type,
            repeated=field.repeated,
            framework_type=mapper.map_field(field),
        )
        for field in message.fields
    )
    return GeneratedMessage(name=message.name, fields=fields)


def find_unresolved_references(
    messages: Sequence[SchemaMessage], mapper: TypeMapper,
) -> list[str]:
    """List custom field types that name no parsed message.

    Entries look like 'Post.author -> Author'.
    """
    known = {m.name for m in messages}
    unresolved = []
    for message in messages:
        for field in message.fields:
            if mapper.is_scalar(field.type) or field.type in known:
                continue
            unresolved.append(f"{message.name}.{field.name} -> {field.type}")
    return unresolved


def build_context(
    messages: Sequence[SchemaMessage],
    output_dir: str | Path,
    mapper: TypeMapper | None = None,
    strict_references: bool = False,
) -> RenderContext:
    """Build the render context for the given output directory."""
    mapper = mapper or TypeMapper()

    app_name = app_name_from_path(output_dir)
    if not is_python_identifier(app_name):
        logger.warning(
            "App name %r is not a valid Python identifier; generated code "
            "will not import cleanly",
            app_name,
        )

    duplicates = [
        name for name, count in Counter(m.name for m in messages).items() if count > 1
    ]
    for name in duplicates:
        logger.warning("Message %s is defined more than once", name)

    unresolved = find_unresolved_references(messages, mapper)
    if unresolved:
        if strict_references:
            raise UnresolvedReferenceError(unresolved)
        for reference in unresolved:
            logger.warning("Unresolved message reference %s", reference)

    context = RenderContext(
        app_name=app_name,
        app_title=title_case(app_name),
        messages=tuple(map_message(m, mapper) for m in messages),
    )
    logger.debug(
        "Built context for app %s with %d message(s)",
        context.app_name,
        len(context.messages),
    )
    return context
