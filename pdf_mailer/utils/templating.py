# pdf_mailer/utils/templating.py
"""
Placeholder templates for the PDF and email bodies.

Templates use two kinds of tokens:

    {{key}}                      replaced by the value for ``key``
    {{#if key}} ... {{/if}}      kept when ``key`` is truthy, dropped otherwise

A template is resolved in one left-to-right pass. Substituted values are
never re-scanned, and conditionals may be nested. Keys missing from the data
are treated as empty.
"""
import re
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from pdf_mailer.exceptions import TemplateSyntaxError

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(
    r"\{\{\s*(?:#if\s+(?P<condition>\w+)|(?P<close>/if)|(?P<key>\w+))\s*\}\}"
)

PDF_TEMPLATE = "pdf/submission.html"
EMAIL_TEMPLATE = "email/submission_confirmation.html"


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return bool(value)


def _as_text(value: Any) -> str:
    return str(value) if is_truthy(value) else ""


def populate_template(template: str, data: Mapping[str, Any], template_name: Optional[str] = None) -> str:
    """Resolve every token in ``template`` against ``data``.

    Raises TemplateSyntaxError for a stray ``{{/if}}`` or an unclosed
    ``{{#if}}``.
    """
    output: List[str] = []
    # (emitting state before the block opened, offset of its marker)
    open_blocks: List[Tuple[bool, int]] = []
    emitting = True
    cursor = 0

    for match in TOKEN_PATTERN.finditer(template):
        if emitting:
            output.append(template[cursor:match.start()])
        cursor = match.end()

        if match.group("condition"):
            open_blocks.append((emitting, match.start()))
            emitting = emitting and is_truthy(data.get(match.group("condition")))
        elif match.group("close"):
            if not open_blocks:
                raise TemplateSyntaxError(
                    f"{{{{/if}}}} at offset {match.start()} has no matching {{{{#if}}}}",
                    position=match.start(),
                    template_name=template_name,
                )
            emitting, _ = open_blocks.pop()
        elif emitting:
            output.append(_as_text(data.get(match.group("key"))))

    if open_blocks:
        position = open_blocks[-1][1]
        raise TemplateSyntaxError(
            f"{{{{#if}}}} at offset {position} is never closed",
            position=position,
            template_name=template_name,
        )

    output.append(template[cursor:])
    return "".join(output)


def check_template(template: str, template_name: Optional[str] = None) -> None:
    populate_template(template, {}, template_name=template_name)


class TemplateLibrary:
    """The PDF and email templates, read from disk once and syntax-checked."""

    def __init__(self, pdf_template: str, email_template: str):
        check_template(pdf_template, PDF_TEMPLATE)
        check_template(email_template, EMAIL_TEMPLATE)
        self.pdf_template = pdf_template
        self.email_template = email_template

    @classmethod
    def from_directory(cls, templates_dir) -> "TemplateLibrary":
        base = Path(templates_dir)
        pdf_path = base / PDF_TEMPLATE
        email_path = base / EMAIL_TEMPLATE
        logger.info(f"Loading templates from {base}")
        return cls(
            pdf_template=pdf_path.read_text(encoding="utf-8"),
            email_template=email_path.read_text(encoding="utf-8"),
        )

    def render_pdf_html(self, context: Mapping[str, Any]) -> str:
        return populate_template(self.pdf_template, context, PDF_TEMPLATE)

    def render_email_html(self, context: Mapping[str, Any]) -> str:
        return populate_template(self.email_template, context, EMAIL_TEMPLATE)
