"""Per-dataset extraction of untyped record attributes into typed slot values.

Raw attribute maps are validated with pydantic payload models and converted to
the frozen domain values in ``geofacts.domain.model.values``. Nothing untyped
crosses this boundary.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from geofacts.domain.model import (
    CallingCode,
    CanonicalEntity,
    Capital,
    Currency,
    FlagEmoji,
    Iso3166_1,
    Language,
    SourceId,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from geofacts.domain.model import RawRecord
    from geofacts.domain.model.values import CollectionItem

_CALLING_CODE: Final = re.compile(r"^\+\d[\d \-]*$")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _upper(value: object) -> object:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)


class RegionPayload(PayloadModel):
    state_name: str | None = None
    sovereignty: str | None = None
    a2: str
    a3: str
    num: int = Field(ge=0, le=999)
    iso_3166_2: str | None = None
    tld: list[str] = Field(default_factory=list)

    _normalize_codes = field_validator("a2", "a3", mode="before")(_upper)
    _normalize_blanks = field_validator("state_name", "sovereignty", mode="before")(_blank_to_none)

    @field_validator("iso_3166_2", mode="before")
    @classmethod
    def _normalize_subdivision(cls, value: object) -> object:
        value = _blank_to_none(value)
        if isinstance(value, str):
            value = value.upper()
            if not value.startswith("ISO 3166-2:"):
                raise ValueError(f"Expected ISO 3166-2: prefix, got {value!r}")
        return value

    @field_validator("tld", mode="before")
    @classmethod
    def _normalize_tld(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return value
        tlds: list[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                continue
            tld = item.strip().lower()
            if not tld.startswith(".") or len(tld) < 3:  # noqa: PLR2004
                raise ValueError(f"Expected .xx domain tld, got {tld!r}")
            tlds.append(tld)
        return tlds


class SovereignStatePayload(PayloadModel):
    long_name: str | None = None
    un_member_state: bool | None = None
    disputed: bool = False

    _normalize_long_name = field_validator("long_name", mode="before")(_blank_to_none)


class CapitalPayload(PayloadModel):
    capital: str = Field(min_length=1)
    endonyms: list[str] = Field(default_factory=list)


class CurrencyPayload(PayloadModel):
    currency_code: str = Field(pattern=r"^[A-Z]{3}$")
    currency_name: str = Field(min_length=1)
    symbol: str | None = None
    fraction_name: str | None = None
    fraction_basic: int | None = Field(default=None, ge=1)

    _normalize_code = field_validator("currency_code", mode="before")(_upper)
    _normalize_optional = field_validator("symbol", "fraction_name", mode="before")(
        _blank_to_none
    )


class CallingCodePayload(PayloadModel):
    calling_code: str

    @field_validator("calling_code", mode="before")
    @classmethod
    def _normalize(cls, value: object) -> object:
        if isinstance(value, int):
            value = f"+{value}"
        if isinstance(value, str):
            value = value.strip()
            if value and not value.startswith("+"):
                value = f"+{value}"
            if not _CALLING_CODE.match(value):
                raise ValueError(f"Expected +<digits> calling code, got {value!r}")
        return value


class LanguageEntryPayload(PayloadModel):
    name: str = Field(min_length=1)
    iso639_1: str | None = None
    iso639_3: str | None = None
    official: bool = True

    _normalize_codes = field_validator("iso639_1", "iso639_3", mode="before")(_blank_to_none)


class LanguagesPayload(PayloadModel):
    languages: list[LanguageEntryPayload] = Field(min_length=1)


class EmojiPayload(PayloadModel):
    emoji: str = Field(min_length=1)


def region_from_record(record: RawRecord) -> tuple[CanonicalEntity, RegionPayload]:
    """Create a draft entity (no sovereignty yet) from a regions record.

    Raises ``pydantic.ValidationError`` or ``ValueError`` on malformed ISO data.
    """

    payload = RegionPayload.model_validate(
        {"a2": record.raw_code, **record.attributes}
        if record.raw_code is not None
        else dict(record.attributes)
    )
    entity = CanonicalEntity(
        name=record.raw_name.strip(),
        state_name=payload.state_name or record.raw_name.strip(),
        iso_3166_1=Iso3166_1(a2=payload.a2, a3=payload.a3, num=payload.num),
        iso_3166_2=payload.iso_3166_2,
        tld=tuple(payload.tld),
    )
    return entity, payload


def _capital(record: RawRecord) -> tuple[Capital]:
    payload = CapitalPayload.model_validate(record.attributes)
    endonyms = tuple(
        dict.fromkeys(name for name in payload.endonyms if name and name != payload.capital)
    )
    return (Capital(name=payload.capital, endonyms=endonyms),)


def _currency(record: RawRecord) -> tuple[Currency]:
    payload = CurrencyPayload.model_validate(record.attributes)
    return (
        Currency(
            code=payload.currency_code,
            name=payload.currency_name,
            symbol=payload.symbol,
            fraction_name=payload.fraction_name,
            fraction_basic=payload.fraction_basic,
        ),
    )


def _calling_code(record: RawRecord) -> tuple[CallingCode]:
    payload = CallingCodePayload.model_validate(record.attributes)
    return (CallingCode(payload.calling_code),)


def _languages(record: RawRecord) -> tuple[Language, ...]:
    payload = LanguagesPayload.model_validate(record.attributes)
    return tuple(
        Language(
            name=entry.name,
            iso639_1=entry.iso639_1,
            iso639_3=entry.iso639_3,
            official=entry.official,
        )
        for entry in payload.languages
    )


def _emoji(record: RawRecord) -> tuple[FlagEmoji]:
    payload = EmojiPayload.model_validate(record.attributes)
    return (FlagEmoji(payload.emoji),)


type SlotValueExtractor = Callable[
    [RawRecord], tuple[Capital | CallingCode | FlagEmoji | CollectionItem, ...]
]

EXTRACTORS: dict[SourceId, SlotValueExtractor] = {
    SourceId.CAPITALS: _capital,
    SourceId.CURRENCIES: _currency,
    SourceId.CALLING_CODES: _calling_code,
    SourceId.LANGUAGES: _languages,
    SourceId.EMOJIS: _emoji,
}


def extract_slot_values(
    dataset: SourceId, record: RawRecord
) -> tuple[Capital | CallingCode | FlagEmoji | CollectionItem, ...]:
    """Return the typed values ``record`` contributes to ``dataset``'s slot."""

    try:
        extractor = EXTRACTORS[dataset]
    except KeyError:
        raise ValueError(f"Dataset {dataset} has no attribute slot") from None
    return extractor(record)
