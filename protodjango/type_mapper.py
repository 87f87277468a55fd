"""Map schema field types to Django model field declarations.

Scalar types are looked up in a registry of builder functions; any type
name without a builder is treated as a reference to another message and
becomes a ForeignKey.

  int32, int64    -> models.IntegerField()
  string          -> models.CharField(max_length=255)
  bool            -> models.BooleanField()
  float, double   -> models.FloatField()
  <anything else> -> models.ForeignKey('<Type>', on_delete=models.CASCADE)
"""

from __future__ import annotations

from typing import Callable, Mapping

from .logging_config import get_logger
from .schema_parser import SchemaField

logger = get_logger(__name__)

CHAR_FIELD_MAX_LENGTH = 255

FieldBuilder = Callable[[str], str]
RepeatedBuilder = Callable[[SchemaField, str], str]


def integer_field(type_name: str) -> str:
    return "models.IntegerField()"


def char_field(type_name: str) -> str:
    return f"models.CharField(max_length={CHAR_FIELD_MAX_LENGTH})"


def boolean_field(type_name: str) -> str:
    return "models.BooleanField()"


def float_field(type_name: str) -> str:
    return "models.FloatField()"


def relation_field(type_name: str) -> str:
    """Reference another model by name; string form allows forward references."""
    return f"models.ForeignKey('{type_name}', on_delete=models.CASCADE)"


DEFAULT_BUILDERS: dict[str, FieldBuilder] = {
    "int32": integer_field,
    "int64": integer_field,
    "string": char_field,
    "bool": boolean_field,
    "float": float_field,
    "double": float_field,
}


class TypeMapper:
    """Registry of type name -> declaration builder.

    ``repeated_builder``, when set, receives each repeated field together
    with its single-valued declaration and returns the declaration to use.
    Without it, repeated fields render the same as single-valued ones.
    """

    def __init__(
        self,
        builders: Mapping[str, FieldBuilder] | None = None,
        relation_builder: FieldBuilder = relation_field,
        repeated_builder: RepeatedBuilder | None = None,
    ) -> None:
        self._builders: dict[str, FieldBuilder] = dict(
            DEFAULT_BUILDERS if builders is None else builders
        )
        self._relation_builder = relation_builder
        self._repeated_builder = repeated_builder

    def register(self, type_name: str, builder: FieldBuilder) -> None:
        """Add or replace the builder for a type name."""
        self._builders[type_name] = builder

    def is_scalar(self, type_name: str) -> bool:
        return type_name in self._builders

    def map_type(self, type_name: str) -> str:
        """Return the field declaration for a type name. Never fails."""
        builder = self._builders.get(type_name, self._relation_builder)
        return builder(type_name)

    def map_field(self, field: SchemaField) -> str:
        declaration = self.map_type(field.type)
        if field.repeated:
            if self._repeated_builder is not None:
                return self._repeated_builder(field, declaration)
            logger.debug(
                "Repeated field %s rendered as single-valued %s",
                field.name,
                declaration,
            )
        return declaration


_default_mapper = TypeMapper()


def map_type(type_name: str) -> str:
    """Map a type name using the default table."""
    return _default_mapper.map_type(type_name)
