from resort.models.enums import VisitType

DAY_VISIT_AR = "زيارة نهارية"
OVERNIGHT_STAY_AR = "إقامة ليلية"

# Sentinel the booking form sends when the customer leaves chalet choice to the resort
CHALET_DECIDE_LATER = "يتم الاختيار لاحقاً"

_ARABIC_TO_ENUM = {
    DAY_VISIT_AR: VisitType.DAY_VISIT,
    OVERNIGHT_STAY_AR: VisitType.OVERNIGHT_STAY,
}
_ENUM_TO_ARABIC = {v: k for k, v in _ARABIC_TO_ENUM.items()}
_ENUM_TO_ENGLISH = {
    VisitType.DAY_VISIT: "Day Visit",
    VisitType.OVERNIGHT_STAY: "Overnight Stay",
}
_ENGLISH_TO_ENUM = {v.lower(): k for k, v in _ENUM_TO_ENGLISH.items()}

ARABIC_LABELS = tuple(_ARABIC_TO_ENUM)


def from_arabic_label(label: str | None) -> VisitType | None:
    return _ARABIC_TO_ENUM.get(label or "")


def is_valid_arabic_label(label: str | None) -> bool:
    return (label or "") in _ARABIC_TO_ENUM


def to_arabic_label(vt: VisitType | str) -> str:
    return _ENUM_TO_ARABIC[VisitType(vt)]


def to_english_label(vt: VisitType | str) -> str:
    return _ENUM_TO_ENGLISH[VisitType(vt)]


def to_localized_label(vt: VisitType | str, language: str | None) -> str:
    return to_english_label(vt) if language == "en" else to_arabic_label(vt)


def coerce_visit_type(value: str | None) -> VisitType | None:
    """Accept an enum name (DAY_VISIT) or an Arabic/English label. Used by admin endpoints."""
    if not value:
        return None
    v = value.strip()
    if v.upper() in VisitType.__members__:
        return VisitType[v.upper()]
    return _ARABIC_TO_ENUM.get(v) or _ENGLISH_TO_ENUM.get(v.lower())
