import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from .config import DEFAULT_TEMPLATE_DIR, REPORT_TITLE
from .layout import LANDSCAPE, Page

logger = logging.getLogger(__name__)

REPORT_TEMPLATE = "report.html"


@lru_cache(maxsize=8)
def _template_env(template_dir: str) -> Environment:
    return Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def build_html_report(
    pages: Sequence[Page],
    template_dir: Optional[Union[str, Path]] = None,
    title: str = REPORT_TITLE,
) -> str:
    """
    Render the page tree to one standalone HTML document. Each page becomes a
    ``<section>`` whose class carries its orientation, so the stylesheet can
    switch landscape pages to the named ``@page`` rule.

    A missing template yields a short marker string instead of raising, so the
    preview in the app still shows what went wrong.
    """
    env = _template_env(str(template_dir or DEFAULT_TEMPLATE_DIR))
    try:
        template = env.get_template(REPORT_TEMPLATE)
    except TemplateNotFound:
        logger.warning("Template %s not found in %s", REPORT_TEMPLATE, template_dir or DEFAULT_TEMPLATE_DIR)
        return f"[Missing template: {REPORT_TEMPLATE}] {len(pages)} pages for {title}"

    return template.render(
        title=title,
        pages=[page.to_dict() for page in pages],
        has_landscape=any(page.orientation == LANDSCAPE for page in pages),
    )
