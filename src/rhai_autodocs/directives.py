"""Doc-comment directive and section parsing.

A doc comment is plain Markdown with two extra conventions:

    A function that adds two integers together.

    # rhai-autodocs:index:2

    # Example
    ```rhai
    let x = add(1, 2);
    ```

The `# rhai-autodocs:index:<n>` line orders the function in the generated
page and is never displayed. Every other line starting with `#` (outside a
code fence) opens a new section.
"""

from __future__ import annotations

import logging
import re

from .models import Directive, Section, SectionedText

log = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "# rhai-autodocs:"
INDEX_PATTERN = "# rhai-autodocs:index:"
SECTION_MARKER = "#"
FENCE = "```"

_INDEX_RE = re.compile("^" + re.escape(INDEX_PATTERN) + r"(\d+)$")


def parse_doc_comment(text: str | None) -> tuple[Directive | None, SectionedText]:
    """Split a doc comment into its ordering directive and display sections.

    Args:
        text: Doc comment with comment markers already removed.

    Returns:
        The last valid index directive (or None) and the text split into
        sections, with every directive line removed.
    """
    if not text:
        return None, SectionedText()

    directive: Directive | None = None
    sections: list[Section] = []
    heading: str | None = None
    lines: list[str] = []
    in_fence = False

    for line in text.split("\n"):
        stripped = line.strip()

        if stripped.startswith(DIRECTIVE_PREFIX):
            match = _INDEX_RE.match(stripped)
            if match:
                # Last one wins
                directive = Directive(index=int(match.group(1)), line=stripped)
            else:
                log.debug("Ignoring malformed directive %r", stripped)
            continue

        if stripped.startswith(FENCE):
            in_fence = not in_fence
        elif not in_fence and stripped.startswith(SECTION_MARKER):
            if heading is not None or lines:
                sections.append(Section(heading, tuple(lines)))
            heading = line
            lines = []
            continue

        lines.append(line)

    if heading is not None or lines:
        sections.append(Section(heading, tuple(lines)))

    return directive, SectionedText(tuple(sections))


def strip_comment_markers(comments: list[str] | None) -> str | None:
    """Turn raw Rust doc comments (`///`, `/** */`) into plain Markdown."""
    if not comments:
        return None

    lines: list[str] = []
    for comment in comments:
        for raw in comment.split("\n"):
            line = raw.strip()
            for marker in ("///", "//!"):
                if line.startswith(marker):
                    line = line[len(marker) :]
                    if line.startswith(" "):
                        line = line[1:]
                    break
            else:
                if line.startswith("/**") or line.startswith("/*!"):
                    line = line[3:].strip()
                if line.endswith("*/"):
                    line = line[:-2].rstrip()
                if line.startswith("* "):
                    line = line[2:]
                elif line == "*":
                    line = ""
            lines.append(line.rstrip())

    # Block comments leave empty first/last lines behind
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines)


def strip_hidden_code_lines(text: str) -> str:
    """Remove doc-test lines hidden with `#` inside code fences.

    mdbook hides them itself, other Markdown processors do not. Map
    literals (`#{ ... }`) are kept.
    """
    formatted = []
    in_fence = False
    for line in text.split("\n"):
        if line.strip().startswith(FENCE):
            in_fence = not in_fence
            formatted.append(line)
            continue

        if not (in_fence and line.startswith("#") and not line.startswith("#{")):
            formatted.append(line)

    return "\n".join(formatted)
