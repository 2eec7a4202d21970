"""Key schema of the flat keyspace.

The key layout is part of the persisted format and must stay stable:

    settings:last_length       uint64
    url:<code>                 UTF-8 target
    hits:overall:<code>        uint64
    hits:weeklog:<code>        uint64 list
"""

CODE_LENGTH_KEY = "settings:last_length"
URL_PREFIX = "url:"
COUNTER_PREFIX = "hits:overall:"
WEEK_LOG_PREFIX = "hits:weeklog:"


def code_length_key() -> str:
    return CODE_LENGTH_KEY


def url_key(short_code: str) -> str:
    return f"{URL_PREFIX}{short_code}"


def counter_key(short_code: str) -> str:
    return f"{COUNTER_PREFIX}{short_code}"


def week_log_key(short_code: str) -> str:
    return f"{WEEK_LOG_PREFIX}{short_code}"
