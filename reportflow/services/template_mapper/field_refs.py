"""Tagged references describing where a bound value comes from."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

LOGGER = logging.getLogger(__name__)


class _FieldRefBase(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class RecordFieldRef(_FieldRefBase):
    kind: Literal["recordField"] = "recordField"
    field_code: str


class StaticTextRef(_FieldRefBase):
    kind: Literal["staticText"] = "staticText"
    text: str


class ImageUrlRef(_FieldRefBase):
    kind: Literal["imageUrl"] = "imageUrl"
    url: str


class SubtableRef(_FieldRefBase):
    kind: Literal["subtable"] = "subtable"
    field_code: str


class SubtableFieldRef(_FieldRefBase):
    kind: Literal["subtableField"] = "subtableField"
    subtable_code: str
    field_code: str


FieldRef = Annotated[
    Union[RecordFieldRef, StaticTextRef, ImageUrlRef, SubtableRef, SubtableFieldRef],
    Field(discriminator="kind"),
]

_FIELD_REF_TYPES = (RecordFieldRef, StaticTextRef, ImageUrlRef, SubtableRef, SubtableFieldRef)
_FIELD_REF_ADAPTER: TypeAdapter[FieldRef] = TypeAdapter(FieldRef)


def record_field(code: str) -> RecordFieldRef:
    return RecordFieldRef(field_code=code)


def static_text(text: str) -> StaticTextRef:
    return StaticTextRef(text=text)


def image_url(url: str) -> ImageUrlRef:
    return ImageUrlRef(url=url)


def subtable(code: str) -> SubtableRef:
    return SubtableRef(field_code=code)


def subtable_field(subtable_code: str, field_code: str) -> SubtableFieldRef:
    return SubtableFieldRef(subtable_code=subtable_code, field_code=field_code)


def coerce_field_ref(value: Any) -> FieldRef | None:
    """Parse ``value`` into a FieldRef, treating anything malformed as unbound."""

    if value is None:
        return None
    if isinstance(value, _FIELD_REF_TYPES):
        return value
    if not isinstance(value, dict):
        LOGGER.debug("Ignoring non-mapping field reference: %r", value)
        return None
    try:
        return _FIELD_REF_ADAPTER.validate_python(value)
    except ValidationError:
        LOGGER.debug("Ignoring malformed field reference: %r", value)
        return None


def ref_payload(ref: FieldRef | None) -> str:
    """Return the value-bearing string of a reference (code, text or url)."""

    if ref is None:
        return ""
    if isinstance(ref, StaticTextRef):
        return ref.text
    if isinstance(ref, ImageUrlRef):
        return ref.url
    return ref.field_code


def is_bound(ref: FieldRef | None) -> bool:
    return ref_payload(ref).strip() != ""


__all__ = [
    "FieldRef",
    "ImageUrlRef",
    "RecordFieldRef",
    "StaticTextRef",
    "SubtableFieldRef",
    "SubtableRef",
    "coerce_field_ref",
    "image_url",
    "is_bound",
    "record_field",
    "ref_payload",
    "static_text",
    "subtable",
    "subtable_field",
]
