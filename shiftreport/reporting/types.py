from __future__ import annotations

from dataclasses import dataclass, field

from markupsafe import Markup


@dataclass(frozen=True)
class LabeledQuantity:
    label: str
    count: int

    def display(self) -> str:
        return f"{self.label}: {self.count}"


@dataclass(frozen=True)
class PendingCounts:
    admission: int = 0
    progress_note: int = 0
    physician_assessment: int = 0
    observation_unit: int = 0


@dataclass(frozen=True)
class NormalizedReport:
    """Report fields after coercion, clamping and sanitization."""

    email: str
    report_date: str
    shift_lead: str
    imaging: tuple[LabeledQuantity, ...] = ()
    specialist_reviews: tuple[LabeledQuantity, ...] = ()
    counts: PendingCounts = field(default_factory=PendingCounts)
    incidents: Markup = Markup("")


@dataclass(frozen=True)
class ComposedDocument:
    """Self-contained HTML ready for the rendering engine."""

    html: str
    title: str = "Parte Jefatura"
    has_logo: bool = False
