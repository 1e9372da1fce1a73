"""Keyword tables for the keyword classifier.

A KeywordTable is immutable configuration: build it once at process start
and hand it to KeywordClassifier. Category order is significant, the first
category with a matching keyword wins. Specific gear (synths, pedals,
studio) is listed before generic instruments, and accessories come last as
a catch-all. A title that matches two categories resolves to whichever comes
first here.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Mapping, Sequence, Tuple

# Ambiguous short tokens that must match as whole words
DEFAULT_SHORT_KEYWORDS: FrozenSet[str] = frozenset({
    "amp", "bas", "cab", "dj", "pa", "eq", "sub",
    "peak", "conn", "ride",
})

# Keywords up to this length always match as whole words
SHORT_KEYWORD_MAX_LENGTH = 3


@dataclass(frozen=True)
class KeywordTable:
    """Ordered (category, keywords) pairs plus the whole-word keyword set."""
    entries: Tuple[Tuple[str, Tuple[str, ...]], ...]
    short_keywords: FrozenSet[str] = field(default=DEFAULT_SHORT_KEYWORDS)

    @classmethod
    def from_mapping(
        cls,
        keywords: Mapping[str, Iterable[str]],
        order: Sequence[str] = (),
        short_keywords: Iterable[str] = DEFAULT_SHORT_KEYWORDS,
    ) -> "KeywordTable":
        """Build a table from a category → keywords mapping.

        Args:
            keywords: Keyword lists per category
            order: Category priority; categories not listed follow in mapping order
            short_keywords: Keywords forced to whole-word matching
        """
        ordered = [c for c in order if c in keywords]
        ordered += [c for c in keywords if c not in ordered]
        entries = tuple(
            (category, tuple(k.lower() for k in keywords[category]))
            for category in ordered
        )
        return cls(entries=entries, short_keywords=frozenset(k.lower() for k in short_keywords))

    @property
    def categories(self) -> Tuple[str, ...]:
        return tuple(category for category, _ in self.entries)

    def requires_word_boundary(self, keyword: str) -> bool:
        return len(keyword) <= SHORT_KEYWORD_MAX_LENGTH or keyword in self.short_keywords


CATEGORY_PRIORITY: Tuple[str, ...] = (
    "synth-modular",      # Moog, Korg override generic "keyboard"
    "pedals-effects",
    "studio",
    "amplifiers",
    "dj-live",
    "guitars-bass",
    "drums-percussion",
    "keys-pianos",        # real pianos, not synths
    "wind-brass",
    "strings-other",
    "accessories-parts",  # catch-all for cables, cases, etc.
)

CATEGORY_KEYWORDS = {
    "guitars-bass": [
        # Electric guitars
        "gitarr", "guitar", "elgitarr", "stratocaster", "telecaster", "les paul", "sg", "firebird",
        "fender", "gibson", "ibanez", "epiphone", "schecter", "prs", "paul reed smith", "g&l",
        "music man", "suhr", "charvel", "jackson", "esp", "ltd", "squier", "gretsch", "rickenbacker",
        "hagström", "hagstrom", "godin", "reverend", "dean", "bc rich", "washburn", "kramer",
        "aria pro", "cort", "evh", "sterling",
        # Model names
        "rg ", "az ", "sa ", "sr ", "btb", "jem", "gio ", "s520", "s570", "s670", "rga", "rgd", "rgt",
        "jazzmaster", "jaguar", "mustang", "duo-sonic", "bronco", "musicmaster",
        "sg-", "flying v", "explorer", "es-", "es1", "es3",
        # Acoustic
        "akustisk gitarr", "acoustic", "taylor", "martin", "takamine", "yamaha fg", "yamaha c",
        "cordoba", "larrivee", "collings", "santa cruz", "guild", "ovation", "breedlove", "seagull",
        # Bass
        "bas", "bass", "elbas", "precision", "jazz bass", "pbass", "jbass", "hofner", "stingray",
        "warwick", "sandberg", "spector", "lakland", "dingwall", "sadowsky", "fodera", "mayones",
        "marleaux", "zon", "esh", "elrick", "sire", "musicman bass", "sterling bass",
    ],
    "drums-percussion": [
        "trumm", "drum", "trumset", "drumset", "virvel", "snare", "cymbal", "hi-hat", "hihat",
        "pearl", "sonor", "tama", "dw", "drum workshop", "zildjian", "sabian", "paiste", "meinl",
        "mapex", "gretsch drums", "ludwig", "yamaha drums", "istanbul", "bosphorus", "ufip",
        "kick", "bastrumma", "bass drum", "tom", "floor tom", "rack tom", "ride", "crash", "splash",
        "china", "slagverk", "percussion", "congas", "bongos", "cajon", "djembe", "shaker",
        "tambourine", "cowbell", "claves", "guiro", "maracas", "agogo", "cabasa",
    ],
    "keys-pianos": [
        "piano", "pianino", "flygel", "grand piano", "upright piano", "digitalpiano", "stagepiano",
        "el-piano", "rhodes", "wurlitzer", "clavinet", "keyboard", "tangentinstrument", "klaver",
        "clavinova",
        # Stage pianos
        "yamaha p", "yamaha cp", "roland fp", "roland rd", "kawai mp", "casio px", "casio privia",
        "korg sv", "nord piano", "yamaha clavinova", "kawai ca", "roland hp",
        # MIDI controllers
        "midi keyboard", "midiklaviatur", "klaviatur", "controller keyboard", "novation launchkey",
        "arturia keylab", "native instruments", "akai mpk", "alesis v", "roland a-", "korg microkey",
    ],
    "wind-brass": [
        "saxofon", "trumpet", "trombon", "klarinett", "flöjt", "oboe", "fagott", "valthorn",
        "tuba", "euphonium", "cornet", "flugelhorn", "piccolo", "altflöjt", "basklarinett",
        "sopransax", "altsax", "tenorsax", "barytonsax", "munspel", "harmonica", "melodica",
        "selmer", "yamaha ytr", "yamaha yts", "bach", "conn", "king", "buescher", "keilwerth",
        "yanagisawa", "cannonball", "jupiter", "pearl flute", "muramatsu", "burkart",
    ],
    "strings-other": [
        "violin", "fiol", "viola", "cello", "kontrabas", "double bass", "ukulele", "uke",
        "mandolin", "banjo", "dragspel", "accordion", "concertina", "harp", "harpa",
        "sitar", "bouzouki", "dulcimer", "zither", "autoharp", "hurdy gurdy", "vevlira",
        "stradivarius", "stentor", "yamaha silent", "electric violin", "ns design",
    ],
    "amplifiers": [
        "förstärkare", "amp", "combo", "marshall", "vox", "mesa", "boogie", "mesa boogie",
        "peavey", "engl", "orange", "blackstar", "laney", "ampeg", "head", "topteil",
        "cab", "cabinet", "speaker", "högtalare", "rörtop", "tube amp", "rörförstärkare",
        "fender amp", "fender twin", "fender deluxe", "blues junior", "hot rod",
        "soldano", "bogner", "friedman", "diezel", "hughes & kettner", "randall",
        "markbass", "hartke", "gallien krueger", "aguilar", "eden",
        "kemper", "line 6", "helix", "fractal", "axe-fx", "neural dsp", "quad cortex",
        "victory", "matchless", "two rock", "tone king", "supro", "egnater", "bugera",
        "katana", "mustang amp", "champion", "frontman", "rumble", "pathfinder",
    ],
    "pedals-effects": [
        "pedal", "effekt", "effect", "drive", "overdrive", "distortion", "fuzz", "effektpedal",
        "delay", "reverb", "echo", "chorus", "flanger", "phaser", "wah", "tremolo",
        "boss", "mxr", "electro-harmonix", "ehx", "strymon", "eventide", "tc electronic",
        "walrus", "jhs", "keeley", "tube screamer", "big muff", "looper", "multieffekt",
        "fulltone", "earthquaker", "chase bliss", "meris", "source audio",
        "dunlop", "cry baby", "klon", "tuner pedal", "noise gate", "compressor pedal", "booster",
        "timeline", "bigsky", "mobius", "iridium", "deco", "el capistan", "flint",
        "hx stomp", "hx effects", "pod go", "gt-", "me-", "ms-", "zoom ms",
        "rat", "ds-1", "bd-2", "od-", "dd-", "rv-", "ce-", "bf-", "ph-",
    ],
    "synth-modular": [
        "synth", "synthesizer", "moog", "korg", "roland", "yamaha dx", "prophet", "juno", "jupiter",
        "eurorack", "modular", "sequencer", "arturia", "nord", "access virus", "dave smith", "sequential",
        "oberheim", "waldorf", "novation", "behringer synth", "asm", "modal", "dreadbox",
        # Product names sold without the brand in the title
        "minilogue", "monologue", "microkorg", "minimoog", "op-1", "teenage engineering",
        "prologue", "wavestate", "modwave", "opsix", "volca", "ms-20",
        "gaia", "fa-06", "fa-07", "fa-08", "fantom", "jd-xi", "jd-xa", "system-8", "jupiter-x", "juno-x",
        "sh-4d", "mc-101", "mc-707", "tr-8", "tr-8s", "tb-03", "se-02", "boutique",
        "sub 37", "subsequent", "grandmother", "matriarch", "one", "voyager",
        "peak", "summit", "rev2", "ob-6", "prophet-5", "prophet-6", "take 5",
        "hydrasynth", "argon8", "cobalt8", "sledge", "blofeld", "quantum", "iridium synth",
        "sampler", "mpc", "maschine", "elektron", "octatrack", "digitakt", "digitone", "syntakt",
        "analogsynt", "polysynth", "monosynth",
        "nord stage", "nord electro", "nord lead", "nord wave", "nord piano",
        "minifooger", "mother-32", "dfam", "subharmonicon", "werkstatt",
        "microfreak", "minibrute", "matrixbrute", "polybrute", "keylab", "keystep",
    ],
    "studio": [
        # Microphones
        "mikrofon", "microphone", "neumann", "shure", "sennheiser", "akg", "rode", "audio-technica",
        "sm57", "sm58", "sm7b", "u87", "c414", "at2020", "nt1", "nt2", "condensator", "kondensator",
        "beta 52", "beta 58", "ksm", "tlm", "mk4", "procaster", "podmic", "broadcaster",
        # Interfaces
        "interface", "ljudkort", "audio interface", "preamp", "kompressor", "compressor",
        "focusrite", "universal audio", "uad", "api", "neve", "ssl",
        "audient", "motu", "rme", "apogee", "steinberg", "presonus", "antelope",
        "scarlett", "clarett", "saffire", "apollo", "twin", "arrow", "volt",
        "vocaster", "id14", "id22", "id44", "evo", "audiobox", "quantum",
        "babyface", "fireface", "ultralite", "duet", "ensemble", "element",
        "ur22", "ur44", "ur816", "axr4",
        # Monitors
        "studiomonitor", "genelec", "adam audio", "yamaha hs", "krk", "jbl lsr", "dynaudio",
        "rokit", "eris", "a7x", "a8x", "t5v", "t7v", "hs5", "hs7", "hs8",
        # Outboard
        "eq", "equalizer", "mixer", "mackie", "mixerbord", "monitor",
        "outboard", "channel strip", "la-2a", "1176", "dbx", "distressor", "patchbay", "di-box",
        "warm audio", "golden age", "heritage audio", "empirical labs", "rupert neve",
        "midi", "m-audio", "arturia interface", "native instruments",
        "headphone amp", "monitor controller", "talkback", "studio desk",
    ],
    "dj-live": [
        "dj", "turntable", "skivspelare", "cdj", "controller", "pioneer", "technics", "rane", "serato",
        "traktor", "pa", "pa-system", "line array", "subwoofer", "sub", "aktiv högtalare",
        "powered speaker", "ljus", "lighting", "dmx", "moving head", "laser", "strobe", "fog", "haze",
        "denon dj", "numark", "allen & heath", "xone", "djm", "ddj", "rekordbox",
        "in-ear", "iem", "monitor system", "stagebox", "snake", "splitter",
        "turbosound", "rcf", "qsc", "electro-voice", "jbl prx", "jbl eon", "yamaha dxr",
        "sl-1200", "rp-7000", "prime", "sc5000", "sc6000", "x1800",
        "ddj-1000", "ddj-400", "ddj-flx", "xdj-rx", "xdj-xz",
        "thump", "srm", "zlx", "ekx", "k12", "k10", "cf ", "evox",
    ],
    "accessories-parts": [
        "case", "väska", "bag", "gigbag", "flightcase", "hardcase", "softcase",
        "stativ", "stand", "kabel", "cable", "sträng", "string", "plektrum", "pick",
        "strap", "rem", "gitarrem", "mikrofonstativ", "pedalboard", "pickups", "pickup",
        "sadel", "bridge", "tuner", "stämapparat", "capo", "slide",
        "dämpare", "mute", "cymbalställ", "hi-hat stand", "snare stand",
        "noter", "notställ", "metronom", "strängvinda",
        "adapter", "power supply", "strömförsörjning", "isolated power",
        "humbucker", "single coil", "p90", "emg", "seymour duncan", "dimarzio",
        "mono case", "gator case", "skb case", "hiscox", "rockcase",
        "planet waves", "d'addario", "ernie ball", "elixir", "dunlop strap",
    ],
}

DEFAULT_KEYWORD_TABLE = KeywordTable.from_mapping(CATEGORY_KEYWORDS, order=CATEGORY_PRIORITY)
