# tests/utils/test_i18n_utils.py
import json

import pytest

from autotrash.game.models.player_settings import ProfileActionResult
from autotrash.utils import i18n_utils
from autotrash.utils.i18n_utils import get_localized_string, normalize_language, load_translations


def test_every_profile_result_has_english_text():
    for result in ProfileActionResult:
        key = f"profile_result_{result.value}"
        assert get_localized_string(key, "en") != key


def test_formats_placeholders():
    assert get_localized_string("profile_result_created", "en", name="Mining") == 'Profile "Mining" created.'


def test_falls_back_to_default_language():
    assert get_localized_string("trash_list_empty", "ru") == get_localized_string("trash_list_empty", "en")
    assert get_localized_string("trash_list_empty", "de") == "No items in this profile."


def test_unknown_key_returns_key():
    assert get_localized_string("no_such_key", "en") == "no_such_key"


def test_missing_placeholder_returns_raw_template():
    assert get_localized_string("trash_item_added", "en") == "Added to auto-trash: {item_id}"


@pytest.mark.parametrize("locale, expected", [
    ("en-US", "en"),
    ("ru", "ru"),
    ("pt_BR", "pt"),
    (None, "en"),
    ("", "en"),
])
def test_normalize_language(locale, expected):
    assert normalize_language(locale) == expected


def test_load_translations_merges_from_base_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(i18n_utils, "_translations", {})
    monkeypatch.setattr(i18n_utils, "_loaded", False)
    game_data = tmp_path / "game_data"
    game_data.mkdir()
    (game_data / "autotrash_i18n.json").write_text(json.dumps({"de": {"trash_list_empty": "Keine Gegenstände."}}), encoding="utf-8")

    load_translations(str(tmp_path))

    assert get_localized_string("trash_list_empty", "de") == "Keine Gegenstände."
