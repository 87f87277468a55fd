"""Run the whole generation: parse, map, build context, render, write."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .codegen import DJANGO_TARGET, RenderTarget, TemplateRenderer
from .context_builder import RenderContext, build_context
from .logging_config import get_logger
from .schema_parser import parse_schema_file
from .type_mapper import TypeMapper

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = "generated_app"


@dataclass(frozen=True)
class GenerationResult:
    output_dir: Path
    context: RenderContext
    written: list[Path]


def generate_app(
    schema_path: str | Path,
    output_dir: str | Path = DEFAULT_OUTPUT_DIR,
    *,
    target: RenderTarget = DJANGO_TARGET,
    mapper: TypeMapper | None = None,
    strict_references: bool = False,
) -> GenerationResult:
    """Generate an app from a schema file into output_dir.

    Raises a GeneratorError subclass naming the failed stage; nothing is
    rolled back on failure.
    """
    logger.info("Generating %s app from %s into %s", target.name, schema_path, output_dir)
    messages = parse_schema_file(schema_path)
    context = build_context(
        messages,
        output_dir,
        mapper=mapper,
        strict_references=strict_references,
    )
    written = TemplateRenderer(target).write(context, output_dir)
    return GenerationResult(output_dir=Path(output_dir), context=context, written=written)
