import pytest

from type_map import freeze_type_map, load_type_map


def test_load_type_map(tmp_path):
    path = tmp_path / "types.txt"
    path.write_text(
        "HT 41\n"
        "OT   40   water oxygen\n"
        "\n"
        "LONELY\n"
        "POT\t352\n"
        "HT 42\n"
    )
    type_map = load_type_map(str(path))
    assert type_map == {'HT': '42', 'OT': '40', 'POT': '352'}


def test_missing_type_map(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_type_map(str(tmp_path / "absent.txt"))


def test_frozen_type_map_is_read_only():
    frozen = freeze_type_map({'HT': '41'})
    assert frozen['HT'] == '41'
    with pytest.raises(TypeError):
        frozen['OT'] = '40'
    assert freeze_type_map(frozen) is frozen
