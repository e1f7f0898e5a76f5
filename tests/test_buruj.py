import pytest

from asrar.buruj import BURUJ, burj_index, calculate_burj, get_burj


@pytest.mark.parametrize(
    "kabir, expected",
    [(1, 1), (12, 12), (13, 1), (92, 8), (786, 6), (0, 12), (-1, 11)],
)
def test_burj_index(kabir, expected):
    assert burj_index(kabir) == expected


def test_calculate_burj_name():
    assert calculate_burj(786).name == "Virgo"
    assert calculate_burj(1).name == "Aries"


def test_table_complete():
    assert sorted(BURUJ) == list(range(1, 13))
    assert {b.element for b in BURUJ.values()} == {"fire", "water", "air", "earth"}


def test_get_burj():
    info = get_burj(4)
    assert info.name == "Cancer"
    assert info.arabic == "السرطان"
    assert info.to_dict()["planet"] == "Moon"


def test_get_burj_out_of_range():
    with pytest.raises(KeyError):
        get_burj(13)


def test_burj_cycles_every_twelve():
    assert calculate_burj(1).burj == calculate_burj(13).burj == 1
