"""Client for the TMDB TV metadata API"""
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Optional
import logging
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from asian_drama_board.config import (
    get_tmdb_api_key,
    get_tmdb_base_url,
    get_tmdb_image_base_url,
    get_watch_region
)

logger = logging.getLogger(__name__)

ORIGINS = ("all", "KR", "JP", "CN")
ALL_ORIGINS_FILTER = "KR|JP|CN"

PLACEHOLDER_POSTER = (
    "https://www.themoviedb.org/assets/2/v4/glyphicons/basic/"
    "glyphicons-basic-38-picture-grey-c2ebdbb057f2a761418593530d7ca200d644d66e552c3a2969911457383a7c67.svg"
)

CARD_CAST_SIZE = 2
MOCK_PAGE_SIZE = 4
ENRICH_WORKERS = 10

# Served when no API key is configured
MOCK_DRAMAS: List[Dict] = [
    {
        "id": 94796,
        "name": "Crash Landing on You",
        "poster_path": "https://image.tmdb.org/t/p/w600_and_h900_bestv2/6oomDwsUCvS61KEv7kR3ueQNTSO.jpg",
        "backdrop_path": None,
        "overview": "A paragliding mishap drops a South Korean heiress in North Korea.",
        "first_air_date": "2019-12-14",
        "vote_average": 8.8,
        "popularity": 250.5,
        "origin_country": ["KR"],
        "watch_providers": ["Netflix"],
        "characters": [
            {"id": 1, "name": "Yoon Se-ri", "actor_name": "Son Ye-jin",
             "profile_path": "https://image.tmdb.org/t/p/w200/6i8N2D6m4E8YhHaqD9i3InNfX9P.jpg"},
            {"id": 2, "name": "Ri Jeong-hyeok", "actor_name": "Hyun Bin",
             "profile_path": "https://image.tmdb.org/t/p/w200/9y39CH8CH6N2D6m4E8YhHaqD9i3InNfX9P.jpg"},
        ],
    },
    {
        "id": 67915,
        "name": "Goblin",
        "poster_path": "https://image.tmdb.org/t/p/w600_and_h900_bestv2/8v0BfNskm7fV0V2V2V2V2V2V2V.jpg",
        "backdrop_path": None,
        "overview": "In his quest for a bride to break his immortal curse, "
                    "a 939-year-old guardian of souls meets a bright girl.",
        "first_air_date": "2016-12-02",
        "vote_average": 8.7,
        "popularity": 180.2,
        "origin_country": ["KR"],
        "watch_providers": ["Viki"],
        "characters": [
            {"id": 3, "name": "Kim Shin", "actor_name": "Gong Yoo",
             "profile_path": "https://image.tmdb.org/t/p/w200/6H6N2D6m4E8YhHaqD9i3InNfX9P.jpg"},
            {"id": 4, "name": "Ji Eun-tak", "actor_name": "Kim Go-eun",
             "profile_path": "https://image.tmdb.org/t/p/w200/7H6N2D6m4E8YhHaqD9i3InNfX9P.jpg"},
        ],
    },
    {
        "id": 110309,
        "name": "Alice in Borderland",
        "poster_path": "https://image.tmdb.org/t/p/w600_and_h900_bestv2/20mC797v9nuVIdO9Ym9as.jpg",
        "backdrop_path": None,
        "overview": "An obsessive gamer and his friends find themselves in a parallel Tokyo "
                    "where they must compete in games to survive.",
        "first_air_date": "2020-12-10",
        "vote_average": 8.2,
        "popularity": 450.8,
        "origin_country": ["JP"],
        "watch_providers": ["Netflix"],
        "characters": [
            {"id": 101, "name": "Ryohei Arisu", "actor_name": "Kento Yamazaki", "profile_path": None},
            {"id": 102, "name": "Yuzuha Usagi", "actor_name": "Tao Tsuchiya", "profile_path": None},
        ],
    },
    {
        "id": 82505,
        "name": "The Untamed",
        "poster_path": "https://image.tmdb.org/t/p/w600_and_h900_bestv2/7vClS4pYpT76878S978jV0V.jpg",
        "backdrop_path": None,
        "overview": "Two talented disciples of rival clans form a friendship "
                    "and work together to solve a series of mysteries.",
        "first_air_date": "2019-06-27",
        "vote_average": 8.5,
        "popularity": 120.3,
        "origin_country": ["CN"],
        "watch_providers": ["Netflix", "Viki"],
        "characters": [
            {"id": 201, "name": "Wei Wuxian", "actor_name": "Xiao Zhan", "profile_path": None},
            {"id": 202, "name": "Lan Wangji", "actor_name": "Wang Yibo", "profile_path": None},
        ],
    },
]


def validate_origin(origin_country: str) -> str:
    """
    Check an origin filter value.

    Raises:
        ValueError: If the origin is not one of all, KR, JP, CN
    """
    if origin_country not in ORIGINS:
        raise ValueError(f"origin must be one of: {', '.join(ORIGINS)}")
    return origin_country


class TmdbClient:
    """Thin client for the TMDB TV endpoints the board needs.

    Without an API key every call is answered from MOCK_DRAMAS.
    """

    def __init__(
            self,
            api_key: Optional[str] = None,
            base_url: Optional[str] = None,
            image_base_url: Optional[str] = None,
            watch_region: Optional[str] = None
    ):
        self.api_key = api_key if api_key is not None else get_tmdb_api_key()
        self.base_url = (base_url or get_tmdb_base_url()).rstrip('/')
        self.image_base_url = (image_base_url or get_tmdb_image_base_url()).rstrip('/')
        self.watch_region = watch_region or get_watch_region()

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @property
    def use_mock(self) -> bool:
        """True when no API key is configured."""
        return not self.api_key

    def _get(self, path: str, **params) -> Dict:
        url = f"{self.base_url}{path}"
        params['api_key'] = self.api_key
        response = self.session.get(url, params=params, timeout=10)
        response.raise_for_status()
        return response.json()

    def _image_url(self, path: Optional[str], size: str) -> Optional[str]:
        if not path:
            return None
        if path.startswith("http"):
            return path
        return f"{self.image_base_url}/{size}{path}"

    # ===== RAW ENDPOINTS =====

    def discover_tv(self, page: int = 1, origin_country: str = "KR") -> Dict:
        """
        Fetch one page of TV shows for an origin, by popularity.

        Returns:
            {
                "page": 1,
                "results": [...],
                "total_pages": 500,
                "total_results": 10000
            }
        """
        origin_filter = ALL_ORIGINS_FILTER if origin_country == "all" else origin_country
        return self._get(
            "/discover/tv",
            with_origin_country=origin_filter,
            sort_by="popularity.desc",
            page=page
        )

    def get_tv(self, tmdb_id: int) -> Dict:
        """Fetch TV show details"""
        return self._get(f"/tv/{tmdb_id}")

    def get_credits(self, tmdb_id: int) -> Dict:
        """Fetch cast and crew"""
        return self._get(f"/tv/{tmdb_id}/credits")

    def get_watch_providers(self, tmdb_id: int) -> Dict:
        """Fetch streaming providers for every region"""
        return self._get(f"/tv/{tmdb_id}/watch/providers")

    def get_videos(self, tmdb_id: int) -> Dict:
        """Fetch trailers and clips"""
        return self._get(f"/tv/{tmdb_id}/videos")

    # ===== FORMATTING =====

    def format_characters(self, credits: Dict, limit: Optional[int] = None) -> List[Dict]:
        """Turn a credits payload into character dicts."""
        cast = credits.get('cast') or []
        if limit is not None:
            cast = cast[:limit]
        return [
            {
                'id': member.get('id'),
                'name': member.get('character'),
                'actor_name': member.get('name'),
                'profile_path': self._image_url(member.get('profile_path'), 'w200'),
            }
            for member in cast
        ]

    def format_providers(self, providers: Dict) -> List[str]:
        """Names of flatrate providers in the configured watch region."""
        region = (providers.get('results') or {}).get(self.watch_region) or {}
        return [p['provider_name'] for p in region.get('flatrate') or [] if p.get('provider_name')]

    @staticmethod
    def find_trailer_key(videos: Dict) -> Optional[str]:
        """YouTube key of the first trailer, if any."""
        for video in videos.get('results') or []:
            if video.get('site') == 'YouTube' and video.get('type') == 'Trailer':
                return video.get('key')
        return None

    def format_drama(self, show: Dict) -> Dict:
        """Base drama dict from a discover result or details payload."""
        return {
            'id': show['id'],
            'name': show.get('name') or show.get('original_name') or '',
            'poster_path': self._image_url(show.get('poster_path'), 'w500') or PLACEHOLDER_POSTER,
            'backdrop_path': self._image_url(show.get('backdrop_path'), 'original'),
            'overview': show.get('overview') or '',
            'first_air_date': show.get('first_air_date') or None,
            'vote_average': show.get('vote_average') or 0,
            'popularity': show.get('popularity') or 0,
            'origin_country': show.get('origin_country') or [],
            'characters': [],
            'watch_providers': [],
        }

    # ===== BOARD OPERATIONS =====

    def discover(self, page: int = 1, origin_country: str = "KR") -> List[Dict]:
        """
        Fetch a page of dramas enriched with lead cast and providers.

        Args:
            page: 1-based page number
            origin_country: all, KR, JP or CN

        Returns:
            List of drama dicts, empty if the API call fails
        """
        validate_origin(origin_country)

        if self.use_mock:
            dramas = [
                d for d in MOCK_DRAMAS
                if origin_country == "all" or origin_country in d['origin_country']
            ]
            start = (page - 1) * MOCK_PAGE_SIZE
            return [dict(d) for d in dramas[start:start + MOCK_PAGE_SIZE]]

        try:
            data = self.discover_tv(page=page, origin_country=origin_country)
        except requests.RequestException as e:
            logger.error(f"Error fetching dramas (page={page}, origin={origin_country}): {e}")
            return []

        shows = data.get('results', [])
        if not shows:
            return []

        # map() keeps the discover order
        with ThreadPoolExecutor(max_workers=ENRICH_WORKERS) as executor:
            return list(executor.map(self._enrich_card, shows))

    def _enrich_card(self, show: Dict) -> Dict:
        """Card dict with lead cast and providers; a failed lookup leaves them empty."""
        drama = self.format_drama(show)
        try:
            drama['characters'] = self.format_characters(
                self.get_credits(show['id']), limit=CARD_CAST_SIZE
            )
            drama['watch_providers'] = self.format_providers(
                self.get_watch_providers(show['id'])
            )
        except requests.RequestException as e:
            logger.warning(f"Failed to enrich drama {show['id']} ({drama['name']}): {e}")
            drama['characters'] = []
            drama['watch_providers'] = []
        return drama

    def get_drama(self, tmdb_id: int) -> Optional[Dict]:
        """
        Fetch full details for one drama.

        Returns:
            Drama dict with seasons, episodes, genres, trailer and full cast,
            or None if TMDB does not know the id
        """
        if self.use_mock:
            for drama in MOCK_DRAMAS:
                if drama['id'] == tmdb_id:
                    detail = dict(drama)
                    detail.update({
                        'number_of_seasons': 1,
                        'number_of_episodes': 16,
                        'genres': ['Drama'],
                        'trailer_key': None,
                    })
                    return detail
            return None

        try:
            show = self.get_tv(tmdb_id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise

        drama = self.format_drama(show)
        drama.update({
            'number_of_seasons': show.get('number_of_seasons') or 0,
            'number_of_episodes': show.get('number_of_episodes') or 0,
            'genres': [g['name'] for g in show.get('genres') or [] if g.get('name')],
            'trailer_key': None,
        })

        try:
            drama['characters'] = self.format_characters(self.get_credits(tmdb_id))
            drama['watch_providers'] = self.format_providers(self.get_watch_providers(tmdb_id))
            drama['trailer_key'] = self.find_trailer_key(self.get_videos(tmdb_id))
        except requests.RequestException as e:
            logger.warning(f"Failed to enrich drama {tmdb_id}: {e}")

        return drama

    def get_dramas(self, tmdb_ids: List[int]) -> List[Dict]:
        """Fetch several dramas, keeping input order and skipping unknown or failing ids."""
        dramas = []
        for tmdb_id in tmdb_ids:
            try:
                drama = self.get_drama(tmdb_id)
            except requests.RequestException as e:
                logger.warning(f"Skipping drama {tmdb_id}: {e}")
                continue
            if drama is None:
                logger.warning(f"Drama {tmdb_id} not found on TMDB")
                continue
            dramas.append(drama)
        return dramas
