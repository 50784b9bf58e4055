import hashlib
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import (
    ENV_PAGE_NUMBERING,
    ENV_RENDERER,
    PAGE_NUMBERING_MODES,
    RENDERERS,
)


@dataclass(frozen=True)
class ReportContext:
    """
    Immutable description of a report run. This object is passed through the
    aggregator, the renderers, the store and the queue so every artifact
    carries the same provenance.
    """

    company_id: str
    numbering: str = "static"
    renderer: str = "fpdf"
    issued_at: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.numbering not in PAGE_NUMBERING_MODES:
            raise ValueError(f"Unknown page numbering mode: {self.numbering!r}")
        if self.renderer not in RENDERERS:
            raise ValueError(f"Unknown renderer: {self.renderer!r}")

    @classmethod
    def from_env(cls, company_id: str, **overrides) -> "ReportContext":
        """Build a context, taking numbering and renderer from the environment."""
        numbering = os.getenv(ENV_PAGE_NUMBERING, "").strip().lower() or "static"
        renderer = os.getenv(ENV_RENDERER, "").strip().lower() or "fpdf"
        params = {"numbering": numbering, "renderer": renderer}
        params.update(overrides)
        return cls(company_id=company_id, **params)

    @property
    def report_filename(self) -> str:
        return f"IHCS_Report_{self.company_id}.pdf"

    def cache_key(self) -> str:
        stem = f"{self.company_id}|{self.numbering}|{self.renderer}"
        return hashlib.sha256(stem.encode("utf-8")).hexdigest()[:16]
