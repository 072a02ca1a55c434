"""Page snapshot data structures produced by the extractor."""

from __future__ import annotations

from functools import cached_property

from pydantic import BaseModel, ConfigDict, field_validator


class Bounds(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains_point(self, x: float, y: float) -> bool:
        return self.x <= x <= self.right and self.y <= y <= self.bottom


class HeadingEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    text: str
    bounds: Bounds = Bounds()


class ButtonEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    role: str = "button"
    bounds: Bounds = Bounds()


class LinkEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    href: str = ""
    bounds: Bounds = Bounds()


class FormInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "text"
    name: str = ""
    label: str = ""


class FormEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    inputs: tuple[FormInput, ...] = ()
    bounds: Bounds = Bounds()


class ImageEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    alt: str = ""
    src: str = ""
    bounds: Bounds = Bounds()


class CurrencyAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: str
    context: str = ""  # nearest ancestor text with amounts stripped
    bounds: Bounds = Bounds()


class InteractionOutcome(BaseModel):
    """Main content revealed by clicking one auto-detected interactive element."""

    model_config = ConfigDict(frozen=True)

    label: str
    selector: str = ""
    content: str = ""


class ElementRecord(BaseModel):
    """A single matchable element: an interactive control or leaf text node."""

    model_config = ConfigDict(frozen=True)

    tag: str
    text: str = ""
    aria_label: str = ""
    title: str = ""
    alt: str = ""
    role: str = ""
    bounds: Bounds = Bounds()
    has_icon: bool = False

    @property
    def label(self) -> str:
        return self.text or self.aria_label or self.title or self.alt

    @property
    def dedupe_key(self) -> tuple:
        return (
            round(self.bounds.x),
            round(self.bounds.y),
            self.text,
            self.label,
            self.tag,
        )


class PageSnapshot(BaseModel):
    """Structured, immutable extraction of one rendered page."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    title: str = ""
    headings: tuple[HeadingEntry, ...] = ()
    visible_text: tuple[str, ...] = ()  # deduplicated and sorted
    buttons: tuple[ButtonEntry, ...] = ()
    links: tuple[LinkEntry, ...] = ()
    forms: tuple[FormEntry, ...] = ()
    images: tuple[ImageEntry, ...] = ()
    currency_amounts: tuple[CurrencyAmount, ...] = ()
    elements: tuple[ElementRecord, ...] = ()
    structure: tuple[str, ...] = ()  # tags of visible top-level body children
    # Computed style sets, deduplicated and sorted
    background_colors: tuple[str, ...] = ()
    text_colors: tuple[str, ...] = ()
    border_colors: tuple[str, ...] = ()
    classes: tuple[str, ...] = ()
    interactions: tuple[InteractionOutcome, ...] = ()

    @field_validator(
        "visible_text", "background_colors", "text_colors", "border_colors", "classes",
        mode="before",
    )
    @classmethod
    def _dedupe_and_sort(cls, v):
        return tuple(sorted(set(v or ())))

    @cached_property
    def text_set(self) -> frozenset[str]:
        return frozenset(self.visible_text)

    @cached_property
    def button_labels(self) -> tuple[str, ...]:
        return tuple(b.text for b in self.buttons)

    @cached_property
    def heading_keys(self) -> tuple[str, ...]:
        return tuple(f"{h.tag}: {h.text}" for h in self.headings)

    @cached_property
    def leaf_elements(self) -> tuple[ElementRecord, ...]:
        return tuple(e for e in self.elements if e.text)
