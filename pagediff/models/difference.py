"""Difference records produced by the differs, tagged by ``kind``."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .snapshot import Bounds

Severity = Literal["low", "medium", "high"]
PageSide = Literal["url1", "url2"]

SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2}


class Coordinates(BaseModel):
    """Where a difference sits on each page, for overlay rendering."""

    model_config = ConfigDict(frozen=True)

    url1: Optional[Bounds] = None
    url2: Optional[Bounds] = None

    def for_page(self, page: PageSide) -> Bounds | None:
        return self.url1 if page == "url1" else self.url2


class _BaseDifference(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str  # Text, Content, Interactive, Layout, Visual
    category: str
    severity: Severity = "low"
    detail: str = ""
    location: str = ""

    def escalate(self, severity: Severity):
        """Return a copy raised to ``severity``; never lowers it."""
        if SEVERITY_RANK[severity] <= SEVERITY_RANK[self.severity]:
            return self
        return self.model_copy(update={"severity": severity})

    def applies_to(self, page: PageSide) -> bool:
        coordinates = getattr(self, "coordinates", None)
        return coordinates is not None and coordinates.for_page(page) is not None


class TitleDifference(_BaseDifference):
    kind: Literal["title"] = "title"
    url1_value: str = ""
    url2_value: str = ""


class ListDifference(_BaseDifference):
    kind: Literal["list"] = "list"
    count: int = 0
    examples: tuple[str, ...] = ()


class CountDifference(_BaseDifference):
    kind: Literal["count"] = "count"
    url1_value: str = ""
    url2_value: str = ""


class CurrencyDifference(_BaseDifference):
    kind: Literal["currency"] = "currency"
    url1_value: str
    url2_value: str
    coordinates: Optional[Coordinates] = None


class ContentDifference(_BaseDifference):
    kind: Literal["content"] = "content"
    count: int = 1
    coordinates: Optional[Coordinates] = None


Difference = Annotated[
    Union[
        TitleDifference,
        ListDifference,
        CountDifference,
        CurrencyDifference,
        ContentDifference,
    ],
    Field(discriminator="kind"),
]

difference_adapter: TypeAdapter[Difference] = TypeAdapter(Difference)
