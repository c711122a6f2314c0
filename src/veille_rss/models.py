"""Data models for Veille RSS."""

import math
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, validator
from pydantic import model_validator
from typing_extensions import Literal


ANGULAR = "Angular"
JAVA = "Java"
OTHER = "Other"
TOPICS = (ANGULAR, JAVA, OTHER)

ALL = "ALL"

SUMMARY_MAX_LENGTH = 320
MAX_TAGS = 12


def coerce_topic(value: Any) -> str:
    """
    Map an arbitrary value to one of the topic labels.

    Anything that is not exactly "Angular" or "Java" (legacy "Autre", None,
    unknown technologies) becomes "Other".
    """
    if isinstance(value, str) and value in TOPICS:
        return value
    return OTHER


class FeedSource(BaseModel):
    """A configured feed, identifying the provenance of items."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    url: str = ""
    default_tech: str = Field(default=OTHER, alias="defaultTech")

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = data.copy()
        if not data.get("name") and data.get("id"):
            data["name"] = data["id"]
        for key in ("defaultTech", "default_tech"):
            if key in data:
                data[key] = coerce_topic(data[key])
        return data

    @validator("id")
    def validate_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Feed source id must not be empty")
        return value


class NormalizedItem(BaseModel):
    """Canonical, immutable record produced by the item normalizer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = ""
    url: str = ""
    summary: str = ""
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    source_id: str = Field(alias="sourceId")
    source_name: str = Field(default="", alias="sourceName")
    tags: Tuple[str, ...] = ()
    tech: str = OTHER

    @validator("id")
    def validate_id(cls, value: str) -> str:
        if not value:
            raise ValueError("Item id must not be empty")
        return value

    @validator("summary")
    def validate_summary(cls, value: str) -> str:
        if len(value) > SUMMARY_MAX_LENGTH:
            raise ValueError(f"Summary exceeds {SUMMARY_MAX_LENGTH} characters")
        return value

    @validator("tags")
    def validate_tags(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(value) > MAX_TAGS:
            raise ValueError(f"At most {MAX_TAGS} tags are allowed")
        return value

    @validator("tech")
    def validate_tech(cls, value: str) -> str:
        if value not in TOPICS:
            raise ValueError(f"Tech must be one of {list(TOPICS)}")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the snapshot field names."""
        return self.model_dump(by_alias=True, mode="json")


class FilterState(BaseModel):
    """User-driven query parameters; never affects the underlying collection."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    tech: str = ALL
    source_id: str = ALL
    max_age_days: Union[Literal["ALL"], float] = ALL
    favorites_only: bool = False

    @model_validator(mode="before")
    @classmethod
    def _normalize_inputs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = data.copy()
        if data.get("query") is None:
            data["query"] = ""

        age = data.get("max_age_days")
        if age is None or (isinstance(age, str) and age.strip().upper() in ("", ALL)):
            data["max_age_days"] = ALL
        elif isinstance(age, str):
            try:
                data["max_age_days"] = float(age)
            except ValueError:
                raise ValueError(f"Invalid max age: {age!r}")

        for key in ("tech", "source_id"):
            if data.get(key) in (None, ""):
                data[key] = ALL
        return data

    @validator("tech")
    def validate_tech(cls, value: str) -> str:
        if value.upper() == ALL:
            return ALL
        for topic in TOPICS:
            if value.lower() == topic.lower():
                return topic
        raise ValueError(f"Tech must be ALL or one of {list(TOPICS)}")

    @validator("max_age_days")
    def validate_max_age(cls, value: Union[str, float]) -> Union[str, float]:
        if value == ALL:
            return value
        if not math.isfinite(value):
            raise ValueError("Max age must be a finite number")
        if value < 0:
            raise ValueError("Max age must not be negative")
        return value

    def update(self, **changes: Any) -> "FilterState":
        """Return a new, validated state with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return FilterState(**data)


class CollectionStats(BaseModel):
    """Aggregate counts over the unfiltered collection."""

    total: int = 0
    angular: int = 0
    java: int = 0
    other: int = 0
    new_7d: int = 0


class Snapshot(BaseModel):
    """A previously generated batch of raw entries."""

    generated_at: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)


class IngestionReport(BaseModel):
    """Outcome of one ingestion run."""

    mode: Literal["snapshot", "live"]
    generated_at: Optional[str] = None
    raw_count: int = 0
    item_count: int = 0
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors
