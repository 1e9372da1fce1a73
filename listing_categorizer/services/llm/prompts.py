"""Prompts for AI listing categorization (Swedish marketplace)."""
from typing import Optional

from listing_categorizer.models.category import CATEGORIES

CATEGORY_LIST = "\n".join(f"- {c.id}: {c.label} ({c.examples})" for c in CATEGORIES)

CLASSIFICATION_SYSTEM_PROMPT = f"""Du är en expert på musikinstrument och studioutrustning. Din uppgift är att kategorisera produkter korrekt.

KATEGORIER:
{CATEGORY_LIST}

VIKTIGA REGLER (FÖLJ DESSA NOGGRANT):

1. GITARRER & BASAR (guitars-bass): Alla gitarrer och basar - Fender, Gibson, Ibanez, Squier, Warwick, Sandberg
2. TRUMMOR & SLAGVERK (drums-percussion): Trummor, trumset, cymbaler (Zildjian, Sabian), percussion
3. KEYBOARDS & PIANON (keys-pianos): Piano, keyboard, elpiano, Rhodes, Wurlitzer, Yamaha, Roland
4. BLÅSINSTRUMENT (wind-brass): Saxofon, trumpet, klarinett, flöjt, dragspel
5. STRÄNGINSTRUMENT (strings-other): Fiol, cello, ukulele, mandolin

6. FÖRSTÄRKARE (amplifiers): Gitarr/basförstärkare, Kemper, Helix, "combo", "head", "cab"
7. PEDALER & EFFEKTER (pedals-effects): Overdrive, delay, reverb, wah, looper (Boss, MXR, Strymon)
8. STUDIO (studio): Mikrofoner, ljudkort/interface, monitorer
9. DJ & LIVE (dj-live): DJ-controller, turntables, PA-system, ljusutrustning
10. SYNTH & MODULÄRT (synth-modular): Synthesizers, Eurorack, samplers (Elektron, MPC)

EXEMPEL PÅ KNEPIGA FALL:
- "Fender Stratocaster" = guitars-bass (gitarr)
- "Fender Twin Reverb" = amplifiers (gitarrförstärkare)
- "Nord Stage 3" = synth-modular (digital keyboard/synth)
- "Boss DS-1" = pedals-effects (distortionpedal)
- "Shure SM58" = studio (mikrofon)
- "Technics 1210" = dj-live (turntable)

VIKTIGT: Välj ALDRIG "other" om produkten uppenbart passar i en annan kategori. "other" är endast för saker som noter, böcker eller icke-musikrelaterat.

Svara ENDAST med ett JSON-objekt i detta format:
{{"category": "category-id", "confidence": "high/medium/low", "reasoning": "kort förklaring"}}"""


def build_user_prompt(title: str, description: Optional[str] = None) -> str:
    """User message text for one listing."""
    details = f"Titel: {title}"
    if description:
        details += f"\nBeskrivning: {description}"
    return f"Kategorisera denna produkt:\n\n{details}\n\nSvara med JSON."
