"""Unit tests for request validation."""
import pytest

from mapsearch.application.search_criteria import parse_search_criteria
from mapsearch.domain.entities.search_job import LocationSpec
from mapsearch.domain.errors import ValidationError


class TestValidRequests:
    def test_coordinates_only(self) -> None:
        criteria = parse_search_criteria({"q": "coffee shop", "lat": 40.7128, "lng": -74.006})
        spec = criteria.to_location_spec()
        assert spec.has_coordinates
        assert spec.latitude == 40.7128
        assert spec.place_name is None

    def test_place_name_only(self) -> None:
        criteria = parse_search_criteria({"q": "salon", "location": "  Bhilwara, Rajasthan "})
        spec = criteria.to_location_spec()
        assert spec.place_name == "Bhilwara, Rajasthan"
        assert not spec.has_coordinates

    def test_query_is_trimmed(self) -> None:
        criteria = parse_search_criteria({"q": "  pizza  ", "lat": 1.0, "lng": 2.0})
        assert criteria.q == "pizza"

    def test_zero_coordinates_are_valid(self) -> None:
        criteria = parse_search_criteria({"q": "buoy", "lat": 0.0, "lng": 0.0})
        assert criteria.to_location_spec().has_coordinates

    def test_blank_location_with_coordinates(self) -> None:
        criteria = parse_search_criteria({"q": "bar", "location": "  ", "lat": 1.0, "lng": 1.0})
        assert criteria.location is None

    def test_coordinates_preferred_over_place_name(self) -> None:
        criteria = parse_search_criteria(
            {"q": "coffee", "location": "Bhilwara", "lat": 1.0, "lng": 2.0}
        )
        spec = criteria.to_location_spec()
        assert spec == LocationSpec(latitude=1.0, longitude=2.0)
        assert spec.place_name is None


class TestInvalidRequests:
    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_missing_or_empty_query(self, query: str | None) -> None:
        with pytest.raises(ValidationError):
            parse_search_criteria({"q": query, "lat": 1.0, "lng": 1.0})

    def test_query_too_long(self) -> None:
        with pytest.raises(ValidationError):
            parse_search_criteria({"q": "x" * 101, "lat": 1.0, "lng": 1.0})

    def test_custom_query_limit(self) -> None:
        with pytest.raises(ValidationError):
            parse_search_criteria({"q": "abcdef", "lat": 1.0, "lng": 1.0}, query_max_length=5)

    def test_no_location_at_all(self) -> None:
        with pytest.raises(ValidationError, match="required"):
            parse_search_criteria({"q": "coffee"})

    def test_incomplete_coordinate_pair(self) -> None:
        with pytest.raises(ValidationError, match="together"):
            parse_search_criteria({"q": "coffee", "lat": 40.0})

    @pytest.mark.parametrize("lat,lng", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.1), (0.0, -181.0)])
    def test_out_of_range_coordinates(self, lat: float, lng: float) -> None:
        with pytest.raises(ValidationError):
            parse_search_criteria({"q": "coffee", "lat": lat, "lng": lng})
