"""Pydantic models for the version catalog (``versioning.json``)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from logging import getLogger
from typing import Annotated, cast

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

log = getLogger(__name__)

Capability = Annotated[int, Field(ge=0, le=255)]
TEMPLATE_SUFFIX = "Template"


class ManifestBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)


class Badge(ManifestBaseModel):
    label: str
    text_color: str = Field(alias="textColor")
    background_color: str = Field(alias="backgroundColor")


class Developer(ManifestBaseModel):
    name: str
    website: str | None = None
    github: str | None = None


class Extension(ManifestBaseModel):
    """One published extension.

    Only ``id`` and ``version`` drive reconciliation. Everything else, unknown keys
    included, is carried along untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    description: str
    version: str
    icon: str
    language: str | None = None
    content_rating: str = Field(alias="contentRating")
    badges: list[Badge | None] = Field(default_factory=list)
    capabilities: Capability | list[Capability] | None = None
    developers: list[Developer | None] = Field(default_factory=list)

    @property
    def is_template(self) -> bool:
        return self.name.endswith(TEMPLATE_SUFFIX)


class BuiltWith(ManifestBaseModel):
    toolchain: str = ""
    types: str = ""


class RepositoryInfo(ManifestBaseModel):
    name: str = ""
    description: str = ""


class VersionCatalog(ManifestBaseModel):
    """Merged catalog of every published extension, keyed by extension id."""

    build_time: str = Field(default="", alias="buildTime")
    built_with: BuiltWith = Field(default_factory=BuiltWith, alias="builtWith")
    repository: RepositoryInfo = Field(default_factory=RepositoryInfo)
    sources: dict[str, Extension] = Field(default_factory=dict)

    @field_validator("sources", mode="before")
    @classmethod
    def _index_by_id(cls, value: object) -> object:
        if isinstance(value, Mapping) or not isinstance(value, Sequence):
            return value
        indexed: dict[str, object] = {}
        for item in cast(Sequence[object], value):
            if isinstance(item, Extension):
                key = item.id
            elif isinstance(item, Mapping):
                key = cast(Mapping[str, object], item).get("id")
            else:
                key = None
            if not isinstance(key, str):
                raise ValueError("Every source entry needs a string id")
            if key in indexed:
                log.warning(f"Duplicate extension id {key!r} in catalog, keeping the later entry")
                del indexed[key]
            indexed[key] = item
        return indexed

    @field_serializer("sources")
    def _sources_as_list(self, sources: dict[str, Extension]) -> list[Extension]:
        return list(sources.values())

    @property
    def ids(self) -> list[str]:
        return list(self.sources)
