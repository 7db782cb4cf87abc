"""Sorting and filtering rules for the drama board."""
from datetime import date
from typing import Dict, Iterable, List, Optional

SORT_OPTIONS = {
    "popularity": "TMDB Popularity",
    "rating-highest": "Highest Community Rating",
    "rating-lowest": "Lowest Community Rating",
    "latest": "Latest Released",
    "oldest": "Oldest Released",
}
DEFAULT_SORT = "popularity"


def parse_air_date(value: Optional[str]) -> Optional[date]:
    """Parse a TMDB YYYY-MM-DD date, None if missing or malformed."""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def collect_actors(dramas: Iterable[Dict]) -> List[str]:
    """Sorted unique actor names across dramas."""
    actors = set()
    for drama in dramas:
        for character in drama.get('characters') or []:
            if character.get('actor_name'):
                actors.add(character['actor_name'])
    return sorted(actors)


def filter_dramas(
        dramas: Iterable[Dict],
        search: Optional[str] = None,
        actor: Optional[str] = None
) -> List[Dict]:
    """
    Keep dramas whose name contains search (case-insensitive) and whose
    cast includes actor (exact name). Empty values do not filter.
    """
    needle = (search or '').strip().lower()
    result = []
    for drama in dramas:
        if needle and needle not in (drama.get('name') or '').lower():
            continue
        if actor and not any(
                c.get('actor_name') == actor for c in drama.get('characters') or []
        ):
            continue
        result.append(drama)
    return result


def sort_dramas(
        dramas: Iterable[Dict],
        sort_by: str = DEFAULT_SORT,
        stats: Optional[Dict[int, Dict]] = None
) -> List[Dict]:
    """
    Sort dramas for display.

    Args:
        dramas: Drama dicts
        sort_by: One of SORT_OPTIONS
        stats: tmdb_id -> {'avg_rating': ...}, used by the rating sorts

    Returns:
        New sorted list. Dramas without an air date go last for the date
        sorts; dramas without stats rank as rated 0.

    Raises:
        ValueError: For an unknown sort option
    """
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"sort must be one of: {', '.join(SORT_OPTIONS)}")

    dramas = list(dramas)
    stats = stats or {}

    if sort_by == "popularity":
        return sorted(dramas, key=lambda d: d.get('popularity') or 0, reverse=True)

    if sort_by in ("latest", "oldest"):
        dated = [d for d in dramas if parse_air_date(d.get('first_air_date'))]
        undated = [d for d in dramas if not parse_air_date(d.get('first_air_date'))]
        dated.sort(
            key=lambda d: parse_air_date(d.get('first_air_date')),
            reverse=(sort_by == "latest")
        )
        return dated + undated

    def avg_rating(drama: Dict) -> float:
        return (stats.get(drama['id']) or {}).get('avg_rating') or 0

    return sorted(dramas, key=avg_rating, reverse=(sort_by == "rating-highest"))
