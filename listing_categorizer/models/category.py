"""Internal category taxonomy for gear listings.

The taxonomy is fixed: every listing carries exactly one of these ids,
with "other" as the fallback when nothing matches.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


OTHER = "other"


@dataclass(frozen=True)
class CategoryInfo:
    """A category of the internal taxonomy."""
    id: str
    label: str
    examples: str


CATEGORIES: Tuple[CategoryInfo, ...] = (
    CategoryInfo(
        "guitars-bass", "Gitarrer & Basar",
        "Gitarrer (Fender, Gibson, Ibanez, Squier, Gretsch), basar (Warwick, Sandberg, Precision, Jazz Bass)",
    ),
    CategoryInfo(
        "drums-percussion", "Trummor & Slagverk",
        "Trummor (Pearl, Tama, DW), cymbaler (Zildjian, Sabian), percussion",
    ),
    CategoryInfo(
        "keys-pianos", "Keyboards & Pianon",
        "Piano, keyboard, elpiano, Rhodes, Wurlitzer, Yamaha, Roland",
    ),
    CategoryInfo(
        "wind-brass", "Blåsinstrument",
        "Saxofon, trumpet, klarinett, flöjt, dragspel",
    ),
    CategoryInfo(
        "strings-other", "Stränginstrument",
        "Fiol, cello, ukulele, mandolin",
    ),
    CategoryInfo(
        "amplifiers", "Förstärkare",
        "Gitarrförstärkare (Marshall, Vox, Fender, Mesa Boogie, Orange), "
        "basförstärkare (Ampeg, Markbass), Kemper, Helix",
    ),
    CategoryInfo(
        "pedals-effects", "Pedaler & Effekter",
        "Overdrive, delay, reverb, looper, wah (Boss, MXR, Strymon)",
    ),
    CategoryInfo(
        "studio", "Studio",
        "Mikrofoner (Shure, Neumann), ljudkort/interface (Focusrite, UA, RME), monitorer, preamps",
    ),
    CategoryInfo(
        "dj-live", "DJ & Live",
        "DJ-controller, turntables (Technics, Pioneer), PA-system, ljusutrustning",
    ),
    CategoryInfo(
        "synth-modular", "Synth & Modulärt",
        "Synthesizers (Moog, Korg, Roland, Nord), Eurorack, samplers (Elektron, MPC)",
    ),
    CategoryInfo(
        "software-computers", "Mjukvara & Datorer",
        "DAW, plugins, VST, datorer för musik",
    ),
    CategoryInfo(
        "accessories-parts", "Tillbehör & Delar",
        "Kablar, case, strängar, pickups, pedalboards",
    ),
    CategoryInfo(
        "services", "Tjänster",
        "Lektioner, replokaler, reparation, uthyrning",
    ),
    CategoryInfo(
        OTHER, "Övrigt",
        "Litteratur, noter, musikmemorabilia - ENDAST om det verkligen inte passar någon annan kategori",
    ),
)

CATEGORY_IDS: Tuple[str, ...] = tuple(c.id for c in CATEGORIES)

_BY_ID: Dict[str, CategoryInfo] = {c.id: c for c in CATEGORIES}


def is_valid_category(category_id: Optional[str]) -> bool:
    """Return True if category_id belongs to the taxonomy."""
    return category_id in _BY_ID


def category_label(category_id: str) -> str:
    """Display label for a category id ("Other" for unknown ids)."""
    info = _BY_ID.get(category_id)
    return info.label if info else "Other"


def coerce_category(category_id: Optional[str]) -> str:
    """Return category_id if valid, otherwise "other"."""
    if category_id and is_valid_category(category_id):
        return category_id
    return OTHER
