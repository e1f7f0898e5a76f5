"""Sacred-number, Divine Name and verse resonance searches."""
from asrar.resonance import (
    SACRED_NUMBERS,
    find_divine_names_by_value,
    nearest_divine_names,
    nearest_sacred,
    quran_resonance,
)


# ── sacred numbers ───────────────────────────────────────────────────

def test_sacred_exact_match():
    res = nearest_sacred(786)
    assert res.nearest == 786
    assert res.is_exact
    assert res.distance == 0
    assert res.description == SACRED_NUMBERS[786]


def test_sacred_nearest_with_delta():
    res = nearest_sacred(92)
    assert res.nearest == 99
    assert res.distance == 7
    assert res.delta == -7
    assert not res.is_exact


def test_sacred_factors():
    assert nearest_sacred(133).factors == (7, 19)
    assert nearest_sacred(693).factors == (7, 99)
    assert nearest_sacred(0).factors == ()


def test_sacred_negative_total():
    res = nearest_sacred(-5)
    assert res.nearest == 7
    assert res.distance == 12


# ── divine names ─────────────────────────────────────────────────────

def test_find_exact_value():
    assert [n.number for n in find_divine_names_by_value(129, system="maghribi")] == [30]


def test_find_with_tolerance_in_table_order():
    numbers = [n.number for n in find_divine_names_by_value(92, tolerance=4, system="maghribi")]
    assert numbers == [3, 8, 32]


def test_find_no_match():
    assert find_divine_names_by_value(-1000) == []


def test_nearest_names_sorted_by_distance_then_number():
    matches = nearest_divine_names(92, limit=3, system="maghribi")
    assert [(m.name.number, m.distance) for m in matches] == [(3, 2), (8, 2), (32, 4)]
    assert all(m.match == "approximate" for m in matches)


def test_nearest_names_exact_flag():
    top = nearest_divine_names(129, limit=1)[0]
    assert top.match == "exact"
    assert top.to_dict()["abjad_value"] == 129
    assert top.to_dict()["number"] == 30


def test_nearest_names_zero_limit():
    assert nearest_divine_names(92, limit=0) == []


# ── verse resonance ──────────────────────────────────────────────────

def test_quran_resonance_mod_mapping():
    ref = quran_resonance(92)
    assert ref.surah_number == 92
    assert ref.surah_name == "Al-Lail"
    assert ref.ayah_number == 8
    assert ref.link == "https://quran.com/92/8"


def test_quran_resonance_wraps_zero_remainders():
    ref = quran_resonance(114)
    assert ref.surah_number == 114
    assert ref.ayah_number == 6


def test_quran_resonance_non_positive():
    assert quran_resonance(0) is None
    assert quran_resonance(-3) is None


def test_sacred_nineteen_exact():
    res = nearest_sacred(19)
    assert res.is_exact
    assert res.distance == 0
