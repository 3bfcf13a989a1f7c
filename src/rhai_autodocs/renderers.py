"""Output renderers for documentation.

Each flavor renders the same model through the same named partials
(page_header, module_doc, function, signatures, section, custom_type, glossary,
link); only the markup changes between flavors.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Mapping

from .directives import FENCE, strip_hidden_code_lines
from .errors import UnsupportedFlavorError
from .models import (
    DocumentedFunction,
    DocumentedType,
    ExportedDocumentation,
    GlossaryEntry,
    ModuleDocumentation,
    Section,
)

log = logging.getLogger(__name__)


def page_id(module_path: str) -> str:
    """File stem of a module page, e.g. "global.my_module" -> "global-my_module"."""
    return re.sub(r"[^A-Za-z0-9_]+", "-", module_path).strip("-")


class Renderer(ABC):
    """Base class for output flavors."""

    name: str
    extension: str

    def __init__(self, config: Mapping[str, Any] | None = None):
        self.config = dict(config or {})

    def render(self, exported: ExportedDocumentation) -> dict[str, str]:
        return {
            path: self.render_module(module, exported)
            for path, module in exported.modules.items()
        }

    def render_module(
        self, module: ModuleDocumentation, exported: ExportedDocumentation
    ) -> str:
        lines = self.page_header(module)

        if module.doc:
            lines.extend(self.module_doc(module.doc))

        for fn in module.functions:
            lines.extend(self.function(fn))

        if module.types:
            lines.extend(["## Types", ""])
            for ty in module.types:
                lines.extend(self.custom_type(ty))

        glossary = exported.glossary
        if glossary:
            lines.extend(self.glossary(glossary, module))

        return "\n".join(lines)

    # Partials shared by every flavor

    def module_doc(self, doc: str) -> list[str]:
        return [self.text(doc), ""]

    def signatures(self, fn: DocumentedFunction) -> list[str]:
        return [
            f"{FENCE}{self.code_language}",
            *(sig.definition() for sig in fn.signatures),
            FENCE,
        ]

    def section(self, section: Section) -> list[str]:
        lines = []
        if section.heading is not None:
            level = min(section.level + 2, 6)
            lines.append(f"{'#' * level} {self.inline(section.title)}")
        body = self.text(section.body)
        if body:
            lines.append(body)
        return lines

    def sections(self, fn: DocumentedFunction) -> list[str]:
        lines: list[str] = []
        for section in fn.text.sections:
            lines.extend(self.section(section))
        return lines

    def glossary(
        self, entries: tuple[GlossaryEntry, ...], current: ModuleDocumentation
    ) -> list[str]:
        lines = ["## Glossary", ""]
        for entry in entries:
            label = entry.label
            if entry.module != current.path:
                label = f"{entry.module}::{entry.label}"
            lines.append(f"- [`{label}`]({self.link(entry, current)})")
        lines.append("")
        return lines

    def text(self, text: str) -> str:
        return text

    def inline(self, text: str) -> str:
        """Escape a single line placed in a heading or link label."""
        return text

    # Flavor-specific partials

    code_language = "rust,ignore"

    @abstractmethod
    def page_header(self, module: ModuleDocumentation) -> list[str]:
        pass

    @abstractmethod
    def function(self, fn: DocumentedFunction) -> list[str]:
        pass

    @abstractmethod
    def custom_type(self, ty: DocumentedType) -> list[str]:
        pass

    @abstractmethod
    def link(self, entry: GlossaryEntry, current: ModuleDocumentation) -> str:
        pass


class MdBookRenderer(Renderer):
    """Markdown with inline HTML cards, for mdbook.

    Config:
        page_extension: Extension used in cross-page links (default ".md").
    """

    name = "mdbook"
    extension = ".md"

    def page_header(self, module: ModuleDocumentation) -> list[str]:
        return [f"# {module.path}", ""]

    def function(self, fn: DocumentedFunction) -> list[str]:
        lines = [
            "",
            "<div markdown=\"span\" style='box-shadow: 0 4px 8px 0 rgba(0,0,0,0.2); "
            "padding: 15px; border-radius: 5px;'>",
            "",
            f'<h2 class="func-name" id="{fn.slug}"> <code>{fn.kind}</code> '
            f"{fn.display_name} </h2>",
            "",
            *self.signatures(fn),
        ]

        if not fn.text.is_empty():
            lines.extend(
                [
                    "",
                    "<details>",
                    '<summary markdown="span"> details </summary>',
                    "",
                    *self.sections(fn),
                    "</details>",
                ]
            )

        lines.extend(["", "</div>", "</br>", ""])
        return lines

    def custom_type(self, ty: DocumentedType) -> list[str]:
        lines = [f'<h3 id="{ty.slug}"> <code>type</code> {ty.name} </h3>', ""]
        if ty.doc:
            lines.extend([self.text(ty.doc), ""])
        return lines

    def link(self, entry: GlossaryEntry, current: ModuleDocumentation) -> str:
        if entry.module == current.path:
            return f"#{entry.slug}"
        extension = self.config.get("page_extension", self.extension)
        return f"{page_id(entry.module)}{extension}#{entry.slug}"


_MDX_BRACES = re.compile(r"([{}])")
_INLINE_CODE = re.compile(r"(`[^`]*`)")


def mdx_escape(line: str) -> str:
    """Escape `<` and braces outside inline code so MDX reads them as text."""
    return "".join(
        part
        if part.startswith("`")
        else _MDX_BRACES.sub(r"\\\1", part.replace("<", "&lt;"))
        for part in _INLINE_CODE.split(line)
    )


class DocusaurusRenderer(Renderer):
    """MDX pages for Docusaurus.

    Config:
        slug_prefix: URL path every page is mounted under (default "/").
    """

    name = "docusaurus"
    extension = ".mdx"
    code_language = "rust"

    @property
    def slug_prefix(self) -> str:
        return str(self.config.get("slug_prefix", "/")).rstrip("/")

    def page_url(self, module_path: str) -> str:
        return f"{self.slug_prefix}/{page_id(module_path)}"

    def page_header(self, module: ModuleDocumentation) -> list[str]:
        return [
            "---",
            f'title: "{module.path}"',
            f"slug: {self.page_url(module.path)}",
            "---",
            "",
            f"# {module.path}",
            "",
        ]

    def function(self, fn: DocumentedFunction) -> list[str]:
        lines = [
            f"## <code>{fn.kind}</code> {self.inline(fn.display_name)} "
            f"{{#{fn.slug}}}",
            "",
            *self.signatures(fn),
            "",
        ]

        if not fn.text.is_empty():
            lines.extend(
                [
                    "<details>",
                    "<summary>details</summary>",
                    "",
                    *self.sections(fn),
                    "",
                    "</details>",
                    "",
                ]
            )
        return lines

    def custom_type(self, ty: DocumentedType) -> list[str]:
        lines = [f"### <code>type</code> {self.inline(ty.name)} {{#{ty.slug}}}", ""]
        if ty.doc:
            lines.extend([self.text(ty.doc), ""])
        return lines

    def link(self, entry: GlossaryEntry, current: ModuleDocumentation) -> str:
        return f"{self.page_url(entry.module)}#{entry.slug}"

    def text(self, text: str) -> str:
        """Hide doc-test lines and escape prose MDX would parse as JSX."""
        text = strip_hidden_code_lines(text)
        lines = []
        in_fence = False
        for line in text.split("\n"):
            if line.strip().startswith(FENCE):
                in_fence = not in_fence
            elif not in_fence:
                line = mdx_escape(line)
            lines.append(line)
        return "\n".join(lines)

    def inline(self, text: str) -> str:
        return mdx_escape(text)


FLAVORS: dict[str, type[Renderer]] = {
    MdBookRenderer.name: MdBookRenderer,
    DocusaurusRenderer.name: DocusaurusRenderer,
}


def get_renderer(flavor: str, config: Mapping[str, Any] | None = None) -> Renderer:
    try:
        renderer_class = FLAVORS[flavor]
    except KeyError:
        raise UnsupportedFlavorError(flavor, sorted(FLAVORS)) from None
    return renderer_class(config)


def render(
    flavor: str,
    flavor_config: Mapping[str, Any] | None,
    exported: ExportedDocumentation,
) -> dict[str, str]:
    """Render every module of an export.

    Args:
        flavor: "mdbook" or "docusaurus".
        flavor_config: Flavor options, e.g. {"slug_prefix": "/docs/api"}.
        exported: Model returned by `export`.

    Returns:
        Rendered page text keyed by module path.

    Raises:
        UnsupportedFlavorError: If the flavor is unknown.
    """
    renderer = get_renderer(flavor, flavor_config)
    pages = renderer.render(exported)
    log.info("Rendered %d pages with the %s flavor", len(pages), flavor)
    return pages
