"""
Geographic Boundary
Extracts the city/province from a free-text Korean postal address and
decides whether it is inside the service area.
"""

import logging
import re
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional

from .errors import UnsupportedAreaError

logger = logging.getLogger(__name__)


class City(Enum):
    """Top-level administrative regions of South Korea."""

    SEOUL = "Seoul"
    BUSAN = "Busan"
    DAEGU = "Daegu"
    INCHEON = "Incheon"
    GWANGJU = "Gwangju"
    DAEJEON = "Daejeon"
    ULSAN = "Ulsan"
    SEJONG = "Sejong"
    GYEONGGI = "Gyeonggi"
    GANGWON = "Gangwon"
    CHUNGBUK = "Chungbuk"
    CHUNGNAM = "Chungnam"
    JEONBUK = "Jeonbuk"
    JEONNAM = "Jeonnam"
    GYEONGBUK = "Gyeongbuk"
    GYEONGNAM = "Gyeongnam"
    JEJU = "Jeju"
    UNKNOWN = "Unknown"


SUPPORTED_CITIES: FrozenSet[City] = frozenset({City.SEOUL, City.INCHEON, City.GYEONGGI})

# Spellings seen on receipts
_CITY_ALIASES: Dict[City, Iterable[str]] = {
    City.SEOUL: ("서울특별시", "서울시", "서울", "seoul", "seoul-si"),
    City.BUSAN: ("부산광역시", "부산시", "부산", "busan", "busan-si"),
    City.DAEGU: ("대구광역시", "대구시", "대구", "daegu", "daegu-si"),
    City.INCHEON: ("인천광역시", "인천시", "인천", "incheon", "incheon-si"),
    City.GWANGJU: ("광주광역시", "광주", "gwangju"),
    City.DAEJEON: ("대전광역시", "대전시", "대전", "daejeon", "daejeon-si"),
    City.ULSAN: ("울산광역시", "울산시", "울산", "ulsan", "ulsan-si"),
    City.SEJONG: ("세종특별자치시", "세종시", "세종", "sejong", "sejong-si"),
    City.GYEONGGI: ("경기도", "경기", "gyeonggi", "gyeonggi-do"),
    City.GANGWON: ("강원특별자치도", "강원도", "강원", "gangwon", "gangwon-do"),
    City.CHUNGBUK: ("충청북도", "충북", "chungcheongbuk-do", "chungbuk"),
    City.CHUNGNAM: ("충청남도", "충남", "chungcheongnam-do", "chungnam"),
    City.JEONBUK: ("전북특별자치도", "전라북도", "전북", "jeollabuk-do", "jeonbuk"),
    City.JEONNAM: ("전라남도", "전남", "jeollanam-do", "jeonnam"),
    City.GYEONGBUK: ("경상북도", "경북", "gyeongsangbuk-do", "gyeongbuk"),
    City.GYEONGNAM: ("경상남도", "경남", "gyeongsangnam-do", "gyeongnam"),
    City.JEJU: ("제주특별자치도", "제주도", "제주", "jeju", "jeju-do"),
}

_ALIAS_LOOKUP: Dict[str, City] = {
    alias: city for city, aliases in _CITY_ALIASES.items() for alias in aliases
}

_TOKEN_SPLIT = re.compile(r"[\s,()\[\]/]+")
_TOKEN_STRIP = ".·:;\"'"

# Korean spellings by length, so 서울특별시 is tried before 서울
_KOREAN_PREFIXES = sorted(
    ((alias, city) for alias, city in _ALIAS_LOOKUP.items() if re.match(r"[가-힣]", alias)),
    key=lambda item: len(item[0]),
    reverse=True,
)
# A district name such as 마포구, 성남시 or 강화군
_DISTRICT = re.compile(r"[가-힣]{1,4}[시군구]")


def _prefix_city(token: str) -> Optional[City]:
    """
    Region written with no space before the district, as in 서울특별시마포구.

    Full names (ending in 시 or 도) match any continuation. Short names such as
    서울 or 경기 only match when the rest of the token is a district name, so
    경기장 is not 경기.
    """
    for alias, city in _KOREAN_PREFIXES:
        if len(token) <= len(alias) or not token.startswith(alias):
            continue
        full_name = len(alias) >= 3 and alias[-1] in "시도"
        if full_name or _DISTRICT.fullmatch(token, len(alias)):
            return city
    return None


def extract_city(address: Optional[str]) -> City:
    """
    Find the region an address belongs to.

    Tokens are compared against known spellings, left to right; the first
    match wins. A token matches when it equals a spelling, or when it starts
    with a Korean region name directly followed by the rest of the address.
    Addresses with no recognizable region give City.UNKNOWN.

    Args:
        address: Free-text postal address

    Returns:
        Matching City, or City.UNKNOWN
    """
    if not address:
        return City.UNKNOWN

    for raw_token in _TOKEN_SPLIT.split(address):
        token = raw_token.strip(_TOKEN_STRIP).casefold()
        if not token:
            continue
        city = _ALIAS_LOOKUP.get(token) or _prefix_city(token)
        if city is not None:
            return city

    return City.UNKNOWN


class GeoBoundaryChecker:
    """
    Decides whether addresses fall inside the service area.

    The area is a fixed allow-list of regions; UNKNOWN is never inside it.
    """

    def __init__(self, supported: Optional[Iterable[City]] = None):
        self.supported = frozenset(supported) if supported is not None else SUPPORTED_CITIES
        self.supported = self.supported - {City.UNKNOWN}

    def extract_city(self, address: Optional[str]) -> City:
        return extract_city(address)

    def is_within_boundary(self, city: City) -> bool:
        return city in self.supported

    def check(self, address: str) -> City:
        """
        Return the address's region if it is supported.

        Raises:
            UnsupportedAreaError: If the region is unknown or outside the allow-list
        """
        city = self.extract_city(address)
        if not self.is_within_boundary(city):
            logger.info(f"Address outside service area: city={city.value}, address={address!r}")
            raise UnsupportedAreaError(address=address, city=city.value)
        return city
