COORDINATE_PRECISION = 3  # ~100 m; nearby searches share one cache entry


def normalize_query(query: str) -> str:
    return " ".join(query.split()).lower()


def build_cache_key(
    query: str,
    latitude: float,
    longitude: float,
    precision: int = COORDINATE_PRECISION,
) -> str:
    """Return the fingerprint used to group near-duplicate searches.

    >>> build_cache_key("Coffee Shop", 40.7128, -74.0060)
    'search:coffee shop:40.713:-74.006'
    """
    lat_key = f"{latitude:.{precision}f}"
    lng_key = f"{longitude:.{precision}f}"
    return f"search:{normalize_query(query)}:{lat_key}:{lng_key}"
