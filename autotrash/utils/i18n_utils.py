import json
import logging
import os
from typing import Dict, Any, List

logger = logging.getLogger(__name__)

DEFAULT_BOT_LANGUAGE = "en"

_translations: Dict[str, Dict[str, str]] = {}
_i18n_files: List[str] = [
    "game_data/autotrash_i18n.json"
]
_loaded = False

# Package directory, so translations resolve no matter where the bot is started from.
_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def load_translations(base_dir: str = "") -> None:
    """
    Loads translation strings from the configured JSON files.
    Merges new translations into the existing _translations dictionary.
    """
    global _translations, _loaded
    if not base_dir:
        base_dir = _PACKAGE_DIR

    for file_path_rel in _i18n_files:
        actual_file_path = os.path.join(base_dir, file_path_rel)
        try:
            with open(actual_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                for lang_code, lang_strings in data.items():
                    if lang_code not in _translations:
                        _translations[lang_code] = {}
                    _translations[lang_code].update(lang_strings)
            logger.debug(f"i18n_utils: Successfully loaded translations from {actual_file_path}")
        except FileNotFoundError:
            logger.warning(f"i18n_utils: Translation file not found: {actual_file_path}")
        except json.JSONDecodeError:
            logger.warning(f"i18n_utils: Error decoding JSON from file: {actual_file_path}")
    _loaded = True


def get_localized_string(key: str, lang: str, default_lang: str = DEFAULT_BOT_LANGUAGE, **kwargs: Any) -> str:
    """
    Retrieves a localized string by key and language, and formats it with kwargs.

    Args:
        key: The i18n key for the string (e.g., "profile_result_created").
        lang: The desired language code (e.g., "en", "ru").
        default_lang: The fallback language if the desired language or key is not found.
        **kwargs: Placeholder arguments for string formatting.

    Returns:
        The localized and formatted string, or the key itself if not found.
    """
    if not _loaded:
        load_translations()

    for candidate_lang in (lang, default_lang):
        lang_strings = _translations.get(candidate_lang)
        if lang_strings and key in lang_strings:
            try:
                return lang_strings[key].format(**kwargs)
            except KeyError as e:
                logger.warning(f"i18n_utils: Formatting KeyError for key '{key}', lang '{candidate_lang}'. Missing placeholder: {e}")
                return lang_strings[key]

    logger.warning(f"i18n_utils: Key '{key}' not found for language '{lang}' or default '{default_lang}'.")
    return key


def normalize_language(locale: Any) -> str:
    """Maps a discord locale such as 'en-US' to the short code used in the translation files."""
    if not locale:
        return DEFAULT_BOT_LANGUAGE
    code = str(locale).split('-')[0].split('_')[0].lower()
    return code or DEFAULT_BOT_LANGUAGE
