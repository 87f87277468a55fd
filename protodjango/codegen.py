"""Render templates and write the generated app.

A RenderTarget describes one output framework: which templates to render
into which files, which fixed files to emit, and which filters the
templates may use. TemplateRenderer applies a RenderContext to a target.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

import jinja2

from .context_builder import RenderContext
from .errors import (
    DirectoryCreationError,
    FileCreationError,
    RenderError,
    TemplateError,
    TemplateSyntaxError,
)
from .logging_config import get_logger
from .naming import to_lower

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class RenderTarget:
    """Templates, static files and filters for one output framework.

    ``templates`` and ``static_files`` map output paths, relative to the
    output directory, to a template name or to fixed file content.
    """

    name: str
    template_dir: Path
    templates: Mapping[str, str] = field(default_factory=dict)
    static_files: Mapping[str, str] = field(default_factory=dict)
    filters: Mapping[str, Callable[..., Any]] = field(default_factory=dict)


DJANGO_TARGET = RenderTarget(
    name="django",
    template_dir=TEMPLATE_DIR / "django",
    templates={
        "models.py": "models.py.j2",
        "serializers.py": "serializers.py.j2",
        "viewsets.py": "viewsets.py.j2",
        "urls.py": "urls.py.j2",
        "admin.py": "admin.py.j2",
        "apps.py": "apps.py.j2",
    },
    static_files={
        "__init__.py": "",
        "migrations/__init__.py": "",
        "tests.py": "# placeholder\n",
    },
    filters={"to_lower": to_lower},
)


class TemplateRenderer:
    """Render a target's templates against a RenderContext."""

    def __init__(self, target: RenderTarget = DJANGO_TARGET) -> None:
        self.target = target
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(target.template_dir)),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        self.env.filters.update(target.filters)

    def render(self, template_name: str, context: RenderContext) -> str:
        """Render one template to a string."""
        try:
            template = self.env.get_template(template_name)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateSyntaxError(
                f"failed to parse template {template_name} "
                f"(line {exc.lineno}): {exc.message}"
            ) from exc
        except jinja2.TemplateNotFound as exc:
            raise TemplateError(
                f"template {template_name} not found in {self.target.template_dir}"
            ) from exc

        try:
            return template.render(**context.template_vars())
        except Exception as exc:
            raise RenderError(f"failed to render {template_name}: {exc}") from exc

    def write(self, context: RenderContext, output_dir: str | Path) -> list[Path]:
        """Create the output tree and write every file of the target.

        Static files are written first, then templates in declaration
        order. Files written before a failure stay on disk.
        """
        root = Path(output_dir)
        written: list[Path] = []

        directories = {root} | {
            (root / rel_path).parent for rel_path in self.target.static_files
        } | {(root / rel_path).parent for rel_path in self.target.templates}
        for directory in sorted(directories):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise DirectoryCreationError(
                    f"failed to create directory {directory}: {exc}"
                ) from exc

        for rel_path, content in self.target.static_files.items():
            written.append(_write_file(root / rel_path, content))

        for rel_path, template_name in self.target.templates.items():
            output = self.render(template_name, context)
            written.append(_write_file(root / rel_path, output))

        logger.info(
            "Wrote %d file(s) for %s target to %s",
            len(written),
            self.target.name,
            root,
        )
        return written


def _write_file(path: Path, content: str) -> Path:
    """Create or overwrite a file with the given content."""
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileCreationError(f"failed to create file {path}: {exc}") from exc
    logger.debug("Wrote %s", path)
    return path


def generate(
    context: RenderContext,
    output_dir: str | Path,
    target: RenderTarget = DJANGO_TARGET,
) -> list[Path]:
    """Render every template of the target into output_dir."""
    return TemplateRenderer(target).write(context, output_dir)
