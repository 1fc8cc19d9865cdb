"""Jinja2 rendering of the files the installer adds to a new project.

The bundled templates ship inside the package (``project/templates``) and are
loaded with a ``PackageLoader`` so they resolve from a zipapp as well as from
an installed wheel. A different directory can be passed for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
)


def underline(text: str, char: str = "=") -> str:
    """Return *text* followed by a Markdown setext underline of the same width."""
    return f"{text}\n{char * len(text)}"


class TemplateRenderer:
    """Renders project templates with strict variables.

    A missing context key raises ``UndefinedError``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        loader: BaseLoader
        if template_dir is None:
            loader = PackageLoader("symfony_installer.project", "templates")
        else:
            loader = FileSystemLoader(str(template_dir))
        self.env = Environment(
            loader=loader,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["underline"] = underline

    def render(self, name: str, context: dict[str, Any]) -> str:
        return self.env.get_template(name).render(**context)

    def render_to_file(self, name: str, output: Path, context: dict[str, Any]) -> Path:
        """Render *name* and write it to *output*, replacing any existing file."""
        output = Path(output)
        output.write_text(self.render(name, context), encoding="utf-8")
        return output

    def list_templates(self) -> list[str]:
        return sorted(self.env.list_templates(filter_func=lambda name: name.endswith(".j2")))
