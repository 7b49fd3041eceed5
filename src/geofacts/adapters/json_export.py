"""JSON documents and flag PNGs written from the assembled views."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, TypeAdapter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from pathlib import Path

    from geofacts.domain.model import CanonicalEntity, Capital, Currency, Language
    from geofacts.domain.reconciliation import DatasetViews, DiagnosticsReport
    from geofacts.flags import RenderedFlag

log = getLogger(__name__)

FLAGS_DIRNAME = "flags"
DIAGNOSTICS_FILENAME = "diagnostics.json"


class DocumentModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class IsoCodesDocument(DocumentModel):
    a2: str
    a3: str
    num: int


class RegionDocument(DocumentModel):
    name: str
    state_name: str
    un_member: bool
    sovereignty: str | None
    iso_3166_1: IsoCodesDocument
    iso_3166_2: str | None
    tld: list[str]

    @classmethod
    def of(cls, entity: CanonicalEntity) -> RegionDocument:
        return cls(
            name=entity.name,
            state_name=entity.state_name,
            un_member=entity.un_member,
            sovereignty=entity.sovereignty,
            iso_3166_1=IsoCodesDocument(
                a2=entity.iso_3166_1.a2,
                a3=entity.iso_3166_1.a3,
                num=entity.iso_3166_1.num,
            ),
            iso_3166_2=entity.iso_3166_2,
            tld=list(entity.tld),
        )


class CapitalDocument(DocumentModel):
    name: str
    endonyms: list[str]

    @classmethod
    def of(cls, capital: Capital) -> CapitalDocument:
        return cls(name=capital.name, endonyms=list(capital.endonyms))


class CurrencyDocument(DocumentModel):
    code: str
    name: str
    symbol: str | None
    fraction_name: str | None
    fraction_basic: int | None

    @classmethod
    def of(cls, currency: Currency) -> CurrencyDocument:
        return cls(
            code=currency.code,
            name=currency.name,
            symbol=currency.symbol,
            fraction_name=currency.fraction_name,
            fraction_basic=currency.fraction_basic,
        )


class LanguageDocument(DocumentModel):
    name: str
    iso639_1: str | None
    iso639_3: str | None
    official: bool

    @classmethod
    def of(cls, language: Language) -> LanguageDocument:
        return cls(
            name=language.name,
            iso639_1=language.iso639_1,
            iso639_3=language.iso639_3,
            official=language.official,
        )


class DiagnosticDocument(DocumentModel):
    kind: str
    dataset: str
    reason: str
    raw_name: str | None
    raw_code: str | None
    candidates: list[str]


_REGIONS = TypeAdapter(dict[str, RegionDocument])
_CAPITALS = TypeAdapter(dict[str, CapitalDocument])
_CURRENCIES = TypeAdapter(dict[str, list[CurrencyDocument]])
_LANGUAGES = TypeAdapter(dict[str, list[LanguageDocument]])
_TEXTS = TypeAdapter(dict[str, str])
_DIAGNOSTICS = TypeAdapter(list[DiagnosticDocument])


def view_documents(views: DatasetViews) -> dict[str, bytes]:
    """Serialize every view to pretty JSON, keyed by file name."""

    return {
        "regions.json": _dump(_REGIONS, _each(views.regions, RegionDocument.of)),
        "sovereign_states.json": _dump(
            _REGIONS, _each(views.sovereign_states, RegionDocument.of)
        ),
        "capitals.json": _dump(_CAPITALS, _each(views.capitals, CapitalDocument.of)),
        "currencies.json": _dump(
            _CURRENCIES,
            {
                code: [CurrencyDocument.of(item) for item in items]
                for code, items in views.currencies.items()
            },
        ),
        "calling_codes.json": _dump(_TEXTS, _each(views.calling_codes, str)),
        "languages.json": _dump(
            _LANGUAGES,
            {
                code: [LanguageDocument.of(item) for item in items]
                for code, items in views.languages.items()
            },
        ),
        "emojis.json": _dump(_TEXTS, _each(views.emojis, str)),
    }


def diagnostics_document(report: DiagnosticsReport) -> bytes:
    documents = [
        DiagnosticDocument(
            kind=str(item.kind),
            dataset=item.dataset,
            reason=item.reason,
            raw_name=item.raw_name,
            raw_code=item.raw_code,
            candidates=list(item.candidates),
        )
        for item in report
    ]
    return _DIAGNOSTICS.dump_json(documents, indent=2) + b"\n"


@dataclass(frozen=True, slots=True)
class JsonExporter:
    output_dir: Path

    def write_views(self, views: DatasetViews) -> list[Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for filename, payload in view_documents(views).items():
            path = self.output_dir / filename
            path.write_bytes(payload)
            written.append(path)
        log.info("Wrote %d view documents to %s", len(written), self.output_dir)
        return written

    def write_diagnostics(self, report: DiagnosticsReport) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / DIAGNOSTICS_FILENAME
        path.write_bytes(diagnostics_document(report))
        log.info("Wrote %d diagnostics to %s", len(report), path)
        return path

    def write_flags(self, flags: Iterable[RenderedFlag]) -> list[Path]:
        written: list[Path] = []
        for flag in flags:
            directory = self.output_dir / FLAGS_DIRNAME / flag.code
            directory.mkdir(parents=True, exist_ok=True)
            for variant, payload in flag.variants.items():
                path = directory / f"{variant}.png"
                path.write_bytes(payload)
                written.append(path)
        log.info("Wrote %d flag images under %s", len(written), self.output_dir / FLAGS_DIRNAME)
        return written


def _each[T, D](view: Mapping[str, T], convert: Callable[[T], D]) -> dict[str, D]:
    return {code: convert(value) for code, value in view.items()}


def _dump[D](adapter: TypeAdapter[D], value: D) -> bytes:
    return adapter.dump_json(value, indent=2) + b"\n"
