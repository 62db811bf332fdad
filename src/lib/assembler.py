"""
Pairs rendered documentation with highlighted code, section by section.
"""

from typing import Callable, List, Optional, Sequence

from ..models.sections import RenderedSection, Section
from .errors import ReconciliationMismatchError


def sections_assemble(
    sections: Sequence[Section],
    rendered_code: Sequence[str],
    doc_render: Callable[[str], Optional[str]],
) -> List[RenderedSection]:
    """
    Build the final section list for a page

    Args:
        sections: Sections of one file, in file order
        rendered_code: Highlighted code aligned by index with `sections`
        doc_render: Converts documentation text to html

    Returns:
        RenderedSection per section; doc is None where the section has no
        documentation text

    Raises:
        ReconciliationMismatchError: If the two inputs differ in length
    """
    if len(rendered_code) != len(sections):
        raise ReconciliationMismatchError(len(sections), len(rendered_code))

    return [
        RenderedSection(
            doc=doc_render(section.doc_text) if section.doc_text else None,
            code=code,
        )
        for section, code in zip(sections, rendered_code)
    ]
