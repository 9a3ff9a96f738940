"""
Database URL utilities
"""
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode, quote_plus
from typing import Optional


def build_url_from_parts(
    host: Optional[str],
    port: Optional[str],
    user: Optional[str],
    password: Optional[str],
    database: Optional[str],
) -> str:
    """
    Assemble a mysql:// URL from the individual DB_* settings

    Returns:
        Database URL, or empty string when host or database is missing
    """
    if not host or not database:
        return ""

    credentials = ""
    if user:
        credentials = quote_plus(user)
        if password:
            credentials += ":" + quote_plus(password)
        credentials += "@"

    netloc = f"{credentials}{host}"
    if port:
        netloc += f":{port}"
    return f"mysql://{netloc}/{database}"


def build_async_url(sync_url: str) -> str:
    """
    Convert mysql:// to mysql+aiomysql://

    Args:
        sync_url: Original database URL

    Returns:
        Async-compatible database URL
    """
    if not sync_url:
        return sync_url

    parts = urlsplit(sync_url)
    scheme = parts.scheme

    if "+" in scheme:
        base_scheme = scheme.split("+")[0]
    else:
        base_scheme = scheme

    if base_scheme in ("mysql", "mariadb"):
        new_parts = ("mysql+aiomysql", parts.netloc, parts.path, parts.query, parts.fragment)
        return urlunsplit(new_parts)

    return sync_url


def normalize_database_url(database_url: str) -> str:
    """
    Force the utf8mb4 charset on the connection URL

    Args:
        database_url: Original database URL

    Returns:
        Normalized database URL
    """
    if not database_url:
        return database_url

    parts = urlsplit(database_url)
    query_pairs = dict(parse_qsl(parts.query, keep_blank_values=True))
    if query_pairs.get("charset") != "utf8mb4":
        if "charset" in query_pairs:
            print(f"Overriding charset '{query_pairs['charset']}' with utf8mb4")
        query_pairs["charset"] = "utf8mb4"

    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query_pairs), parts.fragment))
