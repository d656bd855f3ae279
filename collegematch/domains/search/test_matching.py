"""
Tests for normalization, phonetic codes, query expansion and matcher strategies.
"""

from __future__ import annotations

import pytest

from collegematch.config.errors import StrategyFailure

from .contracts import CorpusMatchStrategy, MatchStrategy
from .lexicon import expand_location, expand_synonyms
from .models import MatchHit, ScoringConfig, SearchableRecord, SearchOptions, StrategyName
from .normalizer import EMPTY_FORM, abbreviation_variants, normalize
from .phonetics import metaphone, phonetic_codes, soundex
from .strategies import build_strategies, enabled_strategies, iter_field_values


@pytest.fixture
def strategies():
    """All strategies with default scoring."""
    return build_strategies()


@pytest.fixture
def college() -> SearchableRecord:
    return SearchableRecord(
        id=1,
        fields={
            "name": "A.J. INSTITUTE OF DENTAL SCIENCES",
            "city": "Bangalore",
            "state": "Karnataka",
        },
    )


# --- Normalizer Tests ---


def test_normalize_forms() -> None:
    """Test the canonical views of a messy string."""
    form = normalize("  A.J.   Institute ")

    assert form.text == "a.j. institute"
    assert form.folded == "a j institute"
    assert form.collapsed == "ajinstitute"
    assert form.tokens == ("a", "j", "institute")


def test_normalize_is_idempotent() -> None:
    """Test normalizing normalized text changes nothing."""
    for raw in ("A.J. Institute", "  MEDICAL   college", "*Medical*", "St. John's"):
        once = normalize(raw)
        assert normalize(once.text).text == once.text


def test_normalize_never_raises() -> None:
    """Test non-text input maps to the empty form."""
    assert normalize(None) is EMPTY_FORM
    assert normalize(True) is EMPTY_FORM
    assert normalize(["a"]) is EMPTY_FORM
    assert normalize("   ") is EMPTY_FORM
    assert normalize(42).text == "42"


def test_normalize_keeps_glob_characters() -> None:
    """Test '*' and '?' survive punctuation folding."""
    form = normalize("*Medical?")

    assert form.folded == "*medical?"
    assert form.has_wildcard
    assert not form.is_empty


def test_punctuation_only_is_empty() -> None:
    assert normalize("...").is_empty


def test_abbreviation_variants() -> None:
    """Test dotted, spaced and squashed variants."""
    assert abbreviation_variants("A.J.") == ("A.J.", "A J", "AJ")
    assert abbreviation_variants("a j") == ("A J", "A.J", "AJ")
    assert abbreviation_variants("  ") == ()


# --- Phonetic Tests ---


def test_soundex_reference_codes() -> None:
    """Test well-known Soundex values."""
    assert soundex("Robert") == "R163"
    assert soundex("Rupert") == "R163"
    assert soundex("Ashcraft") == "A261"
    assert soundex("Lee") == "L000"
    assert soundex("123") == ""


def test_metaphone_variants_agree() -> None:
    """Test common place-name spellings share a Metaphone key."""
    assert metaphone("bangalore") == "BNKLR"
    assert metaphone("bengaluru") == metaphone("bangalore")
    assert metaphone("knight") == metaphone("night")
    assert metaphone("") == ""


def test_phonetic_codes_pair() -> None:
    assert phonetic_codes("mysore") == (soundex("mysore"), metaphone("mysore"))


# --- Lexicon Tests ---


def test_expand_synonyms() -> None:
    """Test whole-query and per-word synonym expansion."""
    assert "government" in expand_synonyms("govt")
    assert "dental surgery" in expand_synonyms("mds college")
    assert "university" in expand_synonyms("mds college")
    assert "govt" not in expand_synonyms("govt")


def test_expand_location() -> None:
    """Test location groups expand in every direction."""
    assert "bangalore" in expand_location("bengaluru")
    assert "bengaluru" in expand_location("bangalore")
    assert "mysore city" in expand_location("mysore")
    assert "mysore" not in expand_location("mysore")


# --- Field Iteration Tests ---


def test_iter_field_values_skips_empty(college: SearchableRecord) -> None:
    record = SearchableRecord(id=2, fields={"name": "X", "city": None, "state": "  "})

    assert [name for name, _ in iter_field_values(record)] == ["name"]
    assert [name for name, _ in iter_field_values(college, ["city", "missing"])] == ["city"]


def test_iter_field_values_rejects_malformed() -> None:
    record = SearchableRecord(id=3, fields={"name": {"nested": "dict"}})

    with pytest.raises(StrategyFailure) as exc_info:
        list(iter_field_values(record))
    assert exc_info.value.details["record_id"] == 3


# --- Strategy Tests ---


def test_strategies_satisfy_contract(strategies) -> None:
    assert set(strategies) == set(StrategyName)
    for name, strategy in strategies.items():
        if name is StrategyName.RELEVANCE:
            assert isinstance(strategy, CorpusMatchStrategy)
        else:
            assert isinstance(strategy, MatchStrategy)
        assert strategy.name == name


def test_exact_strategy(strategies, college: SearchableRecord) -> None:
    """Test punctuation-insensitive substring matching."""
    hits = strategies[StrategyName.EXACT].match(normalize("a j institute"), college)

    assert len(hits) == 1
    assert hits[0].field == "name"
    assert hits[0].raw_score == 1.0


def test_abbreviation_strategy(strategies, college: SearchableRecord) -> None:
    strategy = strategies[StrategyName.ABBREVIATION]

    assert strategy.match(normalize("a j"), college)[0].raw_score == 0.8
    assert strategy.match(normalize("xy"), college) == []


def test_token_partial_strategy(strategies, college: SearchableRecord) -> None:
    """Test matching inside a single token only."""
    strategy = strategies[StrategyName.TOKEN_PARTIAL]

    hits = strategy.match(normalize("dent"), college)
    assert [(h.field, h.raw_score) for h in hits] == [("name", 0.6)]
    assert strategy.match(normalize("dental sci"), college) == []


def test_fuzzy_positional(strategies, college: SearchableRecord) -> None:
    """Test position-aligned overlap against the field prefix."""
    strategy = strategies[StrategyName.FUZZY]

    hits = strategy.match(normalize("bamgalore"), college, ["city"])
    assert len(hits) == 1
    assert hits[0].raw_score == pytest.approx(8 / 9)

    assert strategy.match(normalize("mangalore"), college, ["name"]) == []


def test_fuzzy_edit_metric(college: SearchableRecord) -> None:
    """Test edit alignment finds typos anywhere in the field."""
    strategy = build_strategies(ScoringConfig(fuzzy_metric="edit"))[StrategyName.FUZZY]

    hits = strategy.match(normalize("dentl"), college, ["name"])
    assert len(hits) == 1
    assert 0.6 < hits[0].raw_score <= 1.0


def test_phonetic_strategy(strategies, college: SearchableRecord) -> None:
    strategy = strategies[StrategyName.PHONETIC]

    hits = strategy.match(normalize("bengaluru"), college)
    assert [(h.field, h.raw_score) for h in hits] == [("city", 0.4)]
    assert not strategy.applies_to(normalize("12345"))


def test_wildcard_strategy(strategies, college: SearchableRecord) -> None:
    """Test anchored glob semantics."""
    strategy = strategies[StrategyName.WILDCARD]

    assert strategy.match(normalize("*dental*"), college)[0].raw_score == 1.0
    assert strategy.match(normalize("b?ngalore"), college, ["city"])
    assert strategy.match(normalize("dental*"), college) == []
    assert not strategy.applies_to(normalize("dental"))


def test_synonym_strategy(strategies) -> None:
    record = SearchableRecord(id=5, fields={"name": "GOVERNMENT DENTAL COLLEGE"})

    hits = strategies[StrategyName.SYNONYM].match(normalize("govt"), record)
    assert len(hits) == 1


def test_location_strategy_only_location_fields(strategies) -> None:
    """Test place-name variants never match non-location fields."""
    record = SearchableRecord(
        id=6, fields={"name": "BANGALORE MEDICAL COLLEGE", "city": "Bangalore"}
    )

    hits = strategies[StrategyName.LOCATION].match(normalize("bengaluru"), record)
    assert [h.field for h in hits] == ["city"]


def test_semantic_strategy(strategies, college: SearchableRecord) -> None:
    """Test word overlap blended with word similarity."""
    hits = strategies[StrategyName.SEMANTIC].match(normalize("dental sciences"), college)

    assert len(hits) == 1
    assert hits[0].field == "name"
    assert hits[0].raw_score == pytest.approx(2 / 3 * 0.6 + 0.4)


@pytest.fixture
def catalog() -> list[SearchableRecord]:
    return [
        SearchableRecord(id=1, fields={"name": "BANGALORE MEDICAL COLLEGE", "city": "Bangalore"}),
        SearchableRecord(id=2, fields={"name": "MYSORE DENTAL COLLEGE", "city": "Mysore"}),
        SearchableRecord(id=3, fields={"name": "GOVERNMENT MEDICAL COLLEGE", "city": "Mysuru"}),
    ]


def test_relevance_strategy(strategies, catalog: list[SearchableRecord]) -> None:
    """Test BM25 relevance reports the field holding the query term."""
    strategy = strategies[StrategyName.RELEVANCE]

    hits, failed = strategy.match_corpus(normalize("dental"), catalog)

    assert hits == [MatchHit(2, StrategyName.RELEVANCE, "name", 1.0)]
    assert failed == []


def test_relevance_ignores_common_terms(strategies, catalog: list[SearchableRecord]) -> None:
    """Test a term found in most records adds nothing next to a rare one."""
    strategy = strategies[StrategyName.RELEVANCE]

    hits, _ = strategy.match_corpus(normalize("medical dental"), catalog)

    assert {hit.record_id for hit in hits} == {2}


def test_relevance_field_restriction(strategies, catalog: list[SearchableRecord]) -> None:
    strategy = strategies[StrategyName.RELEVANCE]

    assert strategy.match_corpus(normalize("mysore"), catalog, ("city",))[0] == [
        MatchHit(2, StrategyName.RELEVANCE, "city", 1.0)
    ]
    assert strategy.match_corpus(normalize("dental"), catalog, ("city",)) == ([], [])


def test_relevance_skips_malformed_records(strategies, catalog: list[SearchableRecord]) -> None:
    strategy = strategies[StrategyName.RELEVANCE]
    corpus = [*catalog, SearchableRecord(id=99, fields={"name": ["DENTAL"]})]

    hits, failed = strategy.match_corpus(normalize("dental"), corpus)

    assert [hit.record_id for hit in hits] == [2]
    assert failed == [99]


def test_relevance_empty_corpus(strategies) -> None:
    assert strategies[StrategyName.RELEVANCE].match_corpus(normalize("dental"), []) == ([], [])


def test_enabled_strategies_order() -> None:
    """Test defaults and canonical ordering."""
    assert enabled_strategies(SearchOptions()) == [
        StrategyName.EXACT,
        StrategyName.TOKEN_PARTIAL,
    ]
    everything = SearchOptions(
        fuzzy=True,
        phonetic=True,
        location=True,
        abbreviation=True,
        wildcard=True,
        synonyms=True,
        semantic=True,
        relevance=True,
    )
    assert enabled_strategies(everything) == list(StrategyName)
