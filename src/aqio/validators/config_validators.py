"""Small normalizers used by the settings field validators."""

_SYNC_SQLITE_PREFIX = "sqlite://"
_ASYNC_SQLITE_PREFIX = "sqlite+aiosqlite://"


def to_uppercase(value: str | None) -> str | None:
    if value is None:
        return None
    return value.upper()


def to_lowercase(value: str | None) -> str | None:
    if value is None:
        return None
    return value.lower()


def to_async_sqlite_url(value: str | None) -> str | None:
    """
    Rewrite a plain `sqlite://` URL to use the aiosqlite driver.

    The repositories run on `AsyncEngine`, so a URL copied from a synchronous tool
    (`sqlite:///./aqio.db`) would otherwise fail at engine creation. URLs that
    already name a driver are returned unchanged.
    """
    if value is None:
        return None
    value = value.strip()
    if value.startswith(_SYNC_SQLITE_PREFIX):
        return _ASYNC_SQLITE_PREFIX + value[len(_SYNC_SQLITE_PREFIX):]
    return value
