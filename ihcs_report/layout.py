"""
Page tree produced by the compositor and consumed by the renderers.

Nodes are frozen dataclasses holding only display strings, so two trees built
from the same snapshot compare equal with ``==``.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

PORTRAIT = "portrait"
LANDSCAPE = "landscape"


@dataclass(frozen=True)
class TextRegion:
    text: str
    # title | centered_title | heading | subheading | paragraph | link | label | signature
    style: str = "paragraph"
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class ImageRegion:
    """An asset URL, or the placeholder text to show when there is none."""

    src: Optional[str]
    placeholder: str
    style: str = "image"
    kind: str = field(default="image", init=False)

    @property
    def has_image(self) -> bool:
        return bool(self.src)


@dataclass(frozen=True)
class TableRegion:
    headers: Tuple[str, ...]
    widths: Tuple[float, ...]
    rows: Tuple[Tuple[str, ...], ...]
    # True when ``rows`` holds the single fallback message instead of records.
    is_fallback: bool = False
    kind: str = field(default="table", init=False)

    @property
    def row_count(self) -> int:
        return len(self.rows)


Region = Union[TextRegion, ImageRegion, TableRegion]


@dataclass(frozen=True)
class HeaderRegion:
    logo: ImageRegion
    company_name: str
    implementation_date: str
    reference_no: str
    review_no: str
    document_name: str
    page_number: str
    kind: str = field(default="header", init=False)


@dataclass(frozen=True)
class Page:
    # cover | toc | title | content | table | reference
    template: str
    section: str
    orientation: str = PORTRAIT
    header: Optional[HeaderRegion] = None
    regions: Tuple[Region, ...] = ()
    page_number: Optional[int] = None

    def texts(self) -> Tuple[str, ...]:
        return tuple(r.text for r in self.regions if isinstance(r, TextRegion))

    def tables(self) -> Tuple[TableRegion, ...]:
        return tuple(r for r in self.regions if isinstance(r, TableRegion))

    def images(self) -> Tuple[ImageRegion, ...]:
        return tuple(r for r in self.regions if isinstance(r, ImageRegion))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
