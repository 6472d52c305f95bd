"""Apparel measurement catalogue and label helpers."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Mapping, Optional

SHIRT_FIELDS = ("shirtLength", "chest", "waist", "hip", "shoulder", "sleeveLength", "collar", "cuff")
PANT_FIELDS = ("pantLength", "waist", "hip", "thigh", "knee", "bottom", "crotch")
KURTA_FIELDS = ("kurtaLength", "chest", "waist", "hip", "shoulder", "sleeveLength", "collar")
PYJAMA_FIELDS = ("pyjamaLength", "waist", "hip", "thigh", "bottom")
COAT_FIELDS = ("coatLength", "coatChest", "coatWaist", "coatHip", "coatShoulder", "coatSleeve", "coatCollar")


def _merge(*groups: tuple[str, ...]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for g in groups:
        for f in g:
            seen.setdefault(f, None)
    return tuple(seen)


APPAREL_MEASUREMENTS: dict[str, tuple[str, ...]] = {
    "Shirt": SHIRT_FIELDS,
    "Pant": PANT_FIELDS,
    "Kurta": KURTA_FIELDS,
    "Pyjama": PYJAMA_FIELDS,
    "Kurta Pyjama": _merge(KURTA_FIELDS, PYJAMA_FIELDS),
    "Blazer": COAT_FIELDS,
    "2pc Suit": _merge(COAT_FIELDS, PANT_FIELDS),
    "3pc Suit": _merge(COAT_FIELDS, PANT_FIELDS, ("basketLength",)),
    "Sherwani": _merge(COAT_FIELDS, PYJAMA_FIELDS),
}

# slip sections for combined garments; other apparel prints as one flat grid
SLIP_SECTIONS: dict[str, tuple[tuple[str, tuple[str, ...]], ...]] = {
    "Kurta Pyjama": (("Kurta", KURTA_FIELDS), ("Pyjama", PYJAMA_FIELDS)),
    "2pc Suit": (("Coat", COAT_FIELDS), ("Pant", PANT_FIELDS)),
    "3pc Suit": (("Coat", COAT_FIELDS), ("Pant", PANT_FIELDS), ("Basket", ("basketLength",))),
    "Sherwani": (("Coat", COAT_FIELDS), ("Pyjama", PYJAMA_FIELDS)),
}

SERVICE_CHARGES: dict[str, Decimal] = {
    "Shirt": Decimal(500),
    "Pant": Decimal(600),
    "Kurta+Pyjama": Decimal(900),
    "Kurta": Decimal(500),
    "Pyjama": Decimal(400),
    "3pc Suit": Decimal(5000),
    "2pc Suit": Decimal(3500),
    "Blazer": Decimal(2500),
    "Sherwani": Decimal(7000),
}

_CAPITAL = re.compile(r"([A-Z])")
_SECTION_PREFIX = re.compile(r"^(coat|basket)\s+")


def humanize_key(key: str) -> str:
    """``shirtLength`` -> ``shirt Length``."""
    return _CAPITAL.sub(r" \1", key).strip()


def fields_for(apparel: str) -> tuple[str, ...]:
    return APPAREL_MEASUREMENTS.get(apparel, ())


def default_charge(apparel: str) -> Optional[Decimal]:
    return SERVICE_CHARGES.get(apparel) or SERVICE_CHARGES.get(apparel.replace(" ", "+"))


def recorded(measurements: Mapping[str, str]) -> list[tuple[str, str]]:
    """Key/value pairs whose value is non-empty, keys humanized, insertion order kept."""
    return [(humanize_key(k), v) for k, v in measurements.items() if v]


def summarize(profile: Mapping[str, Mapping[str, str]]) -> str:
    """One line per apparel, e.g. ``[Shirt] Shirt Length: 30 | Chest: 40``; ``N/A`` when empty."""
    lines = []
    for apparel, fields in profile.items():
        parts = [f"{label[:1].upper()}{label[1:]}: {value}" for label, value in recorded(fields or {})]
        if parts:
            lines.append(f"[{apparel}] " + " | ".join(parts))
    return "\n".join(lines) or "N/A"


def slip_label(key: str) -> str:
    """Humanized key without the ``coat``/``basket`` prefix: ``coatLength`` -> ``Length``."""
    return _SECTION_PREFIX.sub("", humanize_key(key))


def slip_sections(apparel: str, measurements: Mapping[str, str]) -> list[tuple[Optional[str], list[tuple[str, str]]]]:
    """
    Recorded measurements grouped the way the workshop reads them.

    Combined garments get one titled section per component (a field shared by
    two components, e.g. ``waist`` on a Kurta Pyjama, appears in both); fields
    outside the catalogue follow in an untitled section. Other apparel is one
    untitled section in insertion order. Empty sections are dropped.
    """
    groups = SLIP_SECTIONS.get(apparel)
    if groups is None:
        entries = recorded(measurements)
        return [(None, entries)] if entries else []

    sections = []
    for title, fields in groups:
        entries = [(slip_label(f), measurements[f]) for f in fields if measurements.get(f)]
        if entries:
            sections.append((title, entries))
    known = {f for _, fields in groups for f in fields}
    extra = [(humanize_key(k), v) for k, v in measurements.items() if v and k not in known]
    if extra:
        sections.append((None, extra))
    return sections
