import os


def _canon_prefix(val):
    """
    Normalize the record namespace to a bare token like 'match':
      - defaults to 'match' when unset/empty
      - strips surrounding whitespace and ':' separators
    """
    val = (val or "match").strip().strip(":")
    return val or "match"


def _flag(val, default: bool) -> bool:
    if val is None:
        return default
    return val.strip().lower() not in {"0", "false", "no", "off", ""}


KEY_PREFIX = _canon_prefix(os.getenv("LIVESCORE_KEY_PREFIX"))

PERSIST_HISTORY = _flag(os.getenv("LIVESCORE_PERSIST_HISTORY"), True)
