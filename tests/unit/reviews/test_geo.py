"""
Tests for address parsing and the service area check.
"""

import pytest

from lor.reviews.errors import UnsupportedAreaError
from lor.reviews.geo import City, GeoBoundaryChecker, SUPPORTED_CITIES, extract_city


@pytest.mark.parametrize(
    "address,expected",
    [
        ("서울특별시 마포구 와우산로 21", City.SEOUL),
        ("서울 강남구 테헤란로 152", City.SEOUL),
        ("Seoul, Mapo-gu, Wausan-ro 21", City.SEOUL),
        ("인천광역시 연수구 송도동 24-5", City.INCHEON),
        ("경기도 수원시 팔달구 효원로 1", City.GYEONGGI),
        ("경기 성남시 분당구 정자일로 95", City.GYEONGGI),
        ("Gyeonggi-do, Suwon-si", City.GYEONGGI),
        ("부산광역시 해운대구 우동 1408", City.BUSAN),
        ("제주특별자치도 제주시 연동", City.JEJU),
        ("(우) 04001 서울시 마포구", City.SEOUL),
    ],
)
def test_extract_city(address, expected):
    assert extract_city(address) is expected


@pytest.mark.parametrize("address", ["", None, "마포구 와우산로 21", "123 Main Street, Springfield"])
def test_extract_city_unknown(address):
    """Addresses without a recognizable region give UNKNOWN instead of failing."""
    assert extract_city(address) is City.UNKNOWN


def test_region_names_inside_words_do_not_match():
    """Only whole tokens count: a stadium (경기장) is not Gyeonggi."""
    assert extract_city("잠실경기장 앞") is City.UNKNOWN


@pytest.mark.parametrize(
    "address,expected",
    [
        ("서울특별시마포구 와우산로 21", City.SEOUL),
        ("경기도성남시 분당구 1", City.GYEONGGI),
        ("인천광역시연수구송도동 24", City.INCHEON),
        ("서울마포구 와우산로 21", City.SEOUL),
        ("경기광주시 오포읍 1", City.GYEONGGI),
        ("부산광역시해운대구 우동 1408", City.BUSAN),
        ("(우)04001 서울시마포구", City.SEOUL),
    ],
)
def test_region_without_space_before_district(address, expected):
    """OCR output often drops the space between the region and the district."""
    assert extract_city(address) is expected


@pytest.mark.parametrize("address", ["경기장로 12", "서울대입구역 3번 출구", "인천공항 T1"])
def test_short_region_name_needs_a_district(address):
    assert extract_city(address) is City.UNKNOWN


def test_unspaced_address_is_inside_service_area():
    assert GeoBoundaryChecker().check("서울특별시마포구 와우산로 21") is City.SEOUL


def test_allow_list_is_seoul_incheon_gyeonggi():
    assert SUPPORTED_CITIES == {City.SEOUL, City.INCHEON, City.GYEONGGI}


@pytest.mark.parametrize("city", [City.SEOUL, City.INCHEON, City.GYEONGGI])
def test_supported_cities_are_within_boundary(city):
    assert GeoBoundaryChecker().is_within_boundary(city)


@pytest.mark.parametrize("city", [City.BUSAN, City.DAEJEON, City.JEJU, City.UNKNOWN])
def test_other_cities_are_outside_boundary(city):
    assert not GeoBoundaryChecker().is_within_boundary(city)


def test_unknown_never_allowed_even_if_configured():
    checker = GeoBoundaryChecker(supported=[City.SEOUL, City.UNKNOWN])
    assert not checker.is_within_boundary(City.UNKNOWN)


def test_check_returns_city_inside_area():
    assert GeoBoundaryChecker().check("인천 중구 공항로 272") is City.INCHEON


def test_check_raises_outside_area():
    with pytest.raises(UnsupportedAreaError) as exc_info:
        GeoBoundaryChecker().check("대구광역시 중구 동성로 1")
    assert exc_info.value.details["city"] == "Daegu"
