"""Unit tests for KeywordClassifier.

Tests cover:
- Brand and model keywords
- Titles without keywords
- Whole-word matching of short keywords
- Category priority (first match wins)
- Custom keyword tables
"""
import pytest

from listing_categorizer.services.classification import (
    DEFAULT_KEYWORD_TABLE,
    KeywordClassifier,
    KeywordTable,
)
from listing_categorizer.services.classification.keywords import CATEGORY_PRIORITY


@pytest.fixture
def classifier() -> KeywordClassifier:
    return KeywordClassifier()


class TestKeywordMatches:
    """Titles with a known brand or keyword."""

    def test_stratocaster_is_guitar(self, classifier):
        """Unique guitar model names classify as guitars-bass."""
        assert classifier.classify("Fender Stratocaster 2019, Sunburst") == "guitars-bass"

    @pytest.mark.parametrize("title,expected", [
        ("Moog Subsequent 37", "synth-modular"),
        ("Korg Minilogue XD", "synth-modular"),
        ("Boss DS-1 Distortion", "pedals-effects"),
        ("Shure SM58 mikrofon", "studio"),
        ("Technics SL-1200 MK2", "dj-live"),
        ("Zildjian K Custom 18\"", "drums-percussion"),
        ("Saxofon Selmer Mark VI", "wind-brass"),
        ("Ukulele sopran med fodral", "strings-other"),
        ("Marshall JCM800 topp", "amplifiers"),
    ])
    def test_known_keywords(self, classifier, title, expected):
        assert classifier.classify(title) == expected

    def test_match_reports_keyword(self, classifier):
        """match() returns the keyword that selected the category."""
        result = classifier.match("Moog Subsequent 37")

        assert result.category == "synth-modular"
        assert result.keyword == "moog"

    def test_case_insensitive(self, classifier):
        assert classifier.classify("FENDER STRATOCASTER") == "guitars-bass"

    def test_html_entities_decoded(self, classifier):
        """Scraped titles with &amp; still match keywords containing '&'."""
        result = classifier.match("Hughes &amp; Kettner Tubemeister")

        assert result.category == "amplifiers"
        assert result.keyword == "hughes & kettner"


class TestNoMatch:
    """Titles without any listed keyword."""

    @pytest.mark.parametrize("title", [
        "Vintage konsertaffisch från 1975",
        "Bordslampa i mässing",
        "Basilika i Rom, tavla",
    ])
    def test_unrelated_titles_are_other(self, classifier, title):
        assert classifier.classify(title) == "other"
        assert classifier.match(title) is None

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_empty_input(self, classifier, title):
        assert classifier.classify(title) == "other"


class TestShortKeywords:
    """Short keywords only match whole words."""

    def test_bas_does_not_match_basilika(self, classifier):
        assert classifier.classify("Basilika i Rom, tavla") != "guitars-bass"

    def test_bas_matches_as_word(self, classifier):
        result = classifier.match("Fin bas, 4 strängar")

        assert result.category == "guitars-bass"
        assert result.keyword == "bas"

    def test_amp_does_not_match_lampa(self, classifier):
        assert classifier.classify("Bordslampa i mässing") != "amplifiers"

    def test_amp_matches_as_word(self, classifier):
        result = classifier.match("Gammal amp till salu")

        assert result.category == "amplifiers"
        assert result.keyword == "amp"

    def test_dj_does_not_match_djembe(self, classifier):
        assert classifier.classify("Djembe från Ghana") == "drums-percussion"

    def test_dj_matches_as_word(self, classifier):
        assert classifier.classify("Säljer dj grejer") == "dj-live"

    def test_rat_does_not_match_inside_stratocaster(self, classifier):
        """'rat' (pedals) must not win over the guitar model name."""
        assert classifier.classify("Stratocaster") == "guitars-bass"

    @pytest.mark.parametrize("title", [
        "Marshall 4x12 speaker cabinet",
        "Marshall 1960A 4x12 speaker cabinet",
        "Orange PPC212 högtalare speaker",
    ])
    def test_peak_does_not_match_inside_speaker(self, classifier, title):
        assert classifier.classify(title) == "amplifiers"

    def test_peak_matches_as_word(self, classifier):
        result = classifier.match("Peak 8 röster")

        assert result.category == "synth-modular"
        assert result.keyword == "peak"

    def test_conn_does_not_match_connector(self, classifier):
        assert classifier.classify("XLR connector hona") != "wind-brass"

    def test_ride_does_not_match_pride(self, classifier):
        assert classifier.classify("Pride flagga, tyg") != "drums-percussion"

    def test_ride_matches_as_word(self, classifier):
        assert classifier.classify("Ride 20 tum, bra ljud") == "drums-percussion"

    def test_requires_word_boundary(self):
        table = DEFAULT_KEYWORD_TABLE

        assert table.requires_word_boundary("rat")
        assert table.requires_word_boundary("bas")
        assert table.requires_word_boundary("amp")
        assert table.requires_word_boundary("peak")
        assert not table.requires_word_boundary("stratocaster")


class TestCategoryPriority:
    """First category in priority order wins on ambiguous titles."""

    def test_priority_order_is_fixed(self):
        assert DEFAULT_KEYWORD_TABLE.categories == CATEGORY_PRIORITY

    def test_bass_drum_resolves_to_guitars(self, classifier):
        """'bass' (guitars-bass) is checked before 'bass drum' (drums)."""
        assert classifier.classify("bass drum") == "guitars-bass"

    def test_fender_twin_reverb_resolves_to_pedals(self, classifier):
        """'reverb' (pedals-effects) precedes 'fender twin' (amplifiers)."""
        assert classifier.classify("Fender Twin Reverb") == "pedals-effects"

    def test_synth_brand_beats_keyboard(self, classifier):
        assert classifier.classify("Roland keyboard") == "synth-modular"


class TestCustomTable:
    """Keyword tables are injected configuration."""

    def test_custom_table(self):
        table = KeywordTable.from_mapping(
            {"studio": ["mikrofon"], "dj-live": ["skivspelare"]},
            order=["dj-live", "studio"],
        )
        classifier = KeywordClassifier(table)

        assert table.categories == ("dj-live", "studio")
        assert classifier.classify("Skivspelare och mikrofon") == "dj-live"
        assert classifier.classify("Fender Stratocaster") == "other"

    def test_keywords_lowercased(self):
        table = KeywordTable.from_mapping({"synth-modular": ["Moog"]})

        assert KeywordClassifier(table).classify("moog grandmother") == "synth-modular"

    def test_unordered_categories_follow_mapping_order(self):
        table = KeywordTable.from_mapping(
            {"studio": ["a1"], "dj-live": ["b1"], "services": ["c1"]},
            order=["services"],
        )

        assert table.categories == ("services", "studio", "dj-live")
