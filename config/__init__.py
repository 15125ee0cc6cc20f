from .parser import load_json_or_jsonc, strip_jsonc
from .settings import RunSettings, load_settings, parse_build_arg, settings_from_mapping

__all__ = [
    "RunSettings",
    "load_json_or_jsonc",
    "load_settings",
    "parse_build_arg",
    "settings_from_mapping",
    "strip_jsonc",
]
