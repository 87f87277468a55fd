"""Tests for the codegen module."""

from pathlib import Path

import pytest

from protodjango.codegen import DJANGO_TARGET, RenderTarget, TemplateRenderer, generate
from protodjango.context_builder import build_context
from protodjango.errors import (
    DirectoryCreationError,
    FileCreationError,
    RenderError,
    TemplateError,
    TemplateSyntaxError,
)
from protodjango.schema_parser import parse_schema


def _context(text: str, app: str = "accounts"):
    return build_context(parse_schema(text), app)


class TestDjangoTarget:
    """Test the declared Django output set."""

    def test_template_files(self):
        assert list(DJANGO_TARGET.templates) == [
            "models.py", "serializers.py", "viewsets.py", "urls.py", "admin.py", "apps.py",
        ]

    def test_static_files(self):
        assert DJANGO_TARGET.static_files == {
            "__init__.py": "",
            "migrations/__init__.py": "",
            "tests.py": "# placeholder\n",
        }

    def test_templates_exist(self):
        for template_name in DJANGO_TARGET.templates.values():
            assert (DJANGO_TARGET.template_dir / template_name).is_file()


class TestRenderDjango:
    """Render each Django template against a small context."""

    @classmethod
    def setup_class(cls):
        cls.renderer = TemplateRenderer()
        cls.ctx = _context(
            "message User { string name = 1; int32 age = 2; }\n"
            "message BlogPost { User owner = 1; }\n"
            "message Empty {}"
        )

    def test_models(self):
        output = self.renderer.render("models.py.j2", self.ctx)
        assert output == (
            "from django.db import models\n"
            "\n"
            "\n"
            "class User(models.Model):\n"
            "    name = models.CharField(max_length=255)\n"
            "    age = models.IntegerField()\n"
            "\n"
            "\n"
            "class BlogPost(models.Model):\n"
            "    owner = models.ForeignKey('User', on_delete=models.CASCADE)\n"
            "\n"
            "\n"
            "class Empty(models.Model):\n"
            "    pass\n"
        )

    def test_empty_message_renders_pass(self):
        output = self.renderer.render("models.py.j2", _context("message Empty {}"))
        assert "class Empty(models.Model):\n    pass\n" in output

    def test_serializers(self):
        output = self.renderer.render("serializers.py.j2", self.ctx)
        assert "from rest_framework import serializers\n" in output
        assert "from .models import (\n    User,\n    BlogPost,\n    Empty,\n)\n" in output
        assert (
            "class UserSerializer(serializers.ModelSerializer):\n"
            "    class Meta:\n"
            "        model = User\n"
            "        fields = '__all__'\n"
        ) in output

    def test_viewsets(self):
        output = self.renderer.render("viewsets.py.j2", self.ctx)
        assert "from .serializers import (\n    UserSerializer,\n" in output
        assert (
            "class BlogPostViewSet(viewsets.ModelViewSet):\n"
            "    queryset = BlogPost.objects.all()\n"
            "    serializer_class = BlogPostSerializer\n"
        ) in output

    def test_urls(self):
        output = self.renderer.render("urls.py.j2", self.ctx)
        assert "router = DefaultRouter()\n" in output
        assert "router.register(r'user', UserViewSet)\n" in output
        assert "router.register(r'blogpost', BlogPostViewSet)\n" in output
        assert "path('', include(router.urls))," in output

    def test_admin(self):
        output = self.renderer.render("admin.py.j2", self.ctx)
        assert output.endswith(
            "admin.site.register(User)\n"
            "admin.site.register(BlogPost)\n"
            "admin.site.register(Empty)\n"
        )

    def test_apps(self):
        output = self.renderer.render("apps.py.j2", self.ctx)
        assert output == (
            "from django.apps import AppConfig\n"
            "\n"
            "\n"
            "class AccountsConfig(AppConfig):\n"
            "    default_auto_field = 'django.db.models.BigAutoField'\n"
            "    name = 'accounts'\n"
        )

    def test_duplicate_names_imported_once(self):
        ctx = _context("message A {} message A {}")
        output = self.renderer.render("admin.py.j2", ctx)
        assert output.count("    A,\n") == 1
        assert output.count("admin.site.register(A)") == 2

    def test_no_messages(self):
        ctx = _context("")
        assert self.renderer.render("models.py.j2", ctx) == "from django.db import models\n"
        assert self.renderer.render("admin.py.j2", ctx) == "from django.contrib import admin\n"
        urls = self.renderer.render("urls.py.j2", ctx)
        assert "from .viewsets" not in urls
        compile(urls, "urls.py", "exec")

    def test_all_templates_compile(self):
        for rel_path, template_name in DJANGO_TARGET.templates.items():
            output = self.renderer.render(template_name, self.ctx)
            compile(output, rel_path, "exec")


class TestWrite:
    """Test writing the output tree."""

    def test_writes_all_files(self, tmp_path):
        out = tmp_path / "accounts"
        written = generate(_context("message User { string name = 1; }"), out)
        expected = [
            "__init__.py", "migrations/__init__.py", "tests.py",
            "models.py", "serializers.py", "viewsets.py", "urls.py", "admin.py", "apps.py",
        ]
        assert written == [out / p for p in expected]
        for path in written:
            assert path.is_file()
        assert (out / "tests.py").read_text() == "# placeholder\n"
        assert (out / "migrations" / "__init__.py").read_text() == ""

    def test_overwrites_existing(self, tmp_path):
        out = tmp_path / "accounts"
        out.mkdir()
        (out / "models.py").write_text("stale")
        generate(_context("message User {}"), out)
        assert "class User(models.Model)" in (out / "models.py").read_text()

    def test_directory_creation_error(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")
        with pytest.raises(DirectoryCreationError, match="failed to create directory"):
            generate(_context("message A {}"), blocker / "app")

    def test_file_creation_error(self, tmp_path):
        out = tmp_path / "app"
        (out / "tests.py").mkdir(parents=True)
        with pytest.raises(FileCreationError, match="tests.py"):
            generate(_context("message A {}"), out)


def _target(template_dir: Path, templates: dict, **kwargs) -> RenderTarget:
    return RenderTarget(name="custom", template_dir=template_dir, templates=templates, **kwargs)


class TestCustomTarget:
    """Alternate targets are plain configuration."""

    def test_custom_templates_filters_and_static_files(self, tmp_path):
        template_dir = tmp_path / "templates"
        template_dir.mkdir()
        (template_dir / "names.txt.j2").write_text(
            "{{ app_title }}:{% for m in messages %} {{ m.name | shout }}{% endfor %}\n"
        )
        target = _target(
            template_dir,
            {"out/names.txt": "names.txt.j2"},
            static_files={"README": "generated\n"},
            filters={"shout": str.upper},
        )
        out = tmp_path / "shop"
        generate(_context("message Cart {} message Item {}", app="shop"), out, target)
        assert (out / "out" / "names.txt").read_text() == "Shop: CART ITEM"
        assert (out / "README").read_text() == "generated\n"

    def test_template_syntax_error(self, tmp_path):
        (tmp_path / "bad.j2").write_text("{% for m in messages %}{{ m.name }}")
        renderer = TemplateRenderer(_target(tmp_path, {"bad.txt": "bad.j2"}))
        with pytest.raises(TemplateSyntaxError, match="bad.j2"):
            renderer.render("bad.j2", _context(""))

    def test_missing_template(self, tmp_path):
        renderer = TemplateRenderer(_target(tmp_path, {}))
        with pytest.raises(TemplateError, match="not found"):
            renderer.render("missing.j2", _context(""))

    def test_undefined_variable_is_render_error(self, tmp_path):
        (tmp_path / "undefined.j2").write_text("{{ no_such_value }}")
        renderer = TemplateRenderer(_target(tmp_path, {}))
        with pytest.raises(RenderError, match="undefined.j2"):
            renderer.render("undefined.j2", _context(""))

    def test_failing_filter_is_render_error(self, tmp_path):
        def _boom(value):
            raise ValueError("cannot format")

        (tmp_path / "boom.j2").write_text("{{ app_name | boom }}")
        renderer = TemplateRenderer(_target(tmp_path, {}, filters={"boom": _boom}))
        with pytest.raises(RenderError, match="cannot format"):
            renderer.render("boom.j2", _context(""))

    def test_any_filter_exception_is_render_error(self, tmp_path):
        def _lookup(value):
            return {}[value]

        (tmp_path / "lookup.j2").write_text("{{ app_name | lookup }}")
        renderer = TemplateRenderer(_target(tmp_path, {}, filters={"lookup": _lookup}))
        with pytest.raises(RenderError, match="lookup.j2") as exc_info:
            renderer.render("lookup.j2", _context(""))
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_earlier_files_kept_on_failure(self, tmp_path):
        template_dir = tmp_path / "templates"
        template_dir.mkdir()
        (template_dir / "good.j2").write_text("ok\n")
        (template_dir / "bad.j2").write_text("{{ missing }}")
        target = _target(template_dir, {"good.txt": "good.j2", "bad.txt": "bad.j2"})
        out = tmp_path / "app"
        with pytest.raises(RenderError):
            generate(_context(""), out, target)
        assert (out / "good.txt").read_text() == "ok\n"
        assert not (out / "bad.txt").exists()
