"""
Tests for map URL templating
"""

from urllib.parse import urlparse, parse_qs

import pytest

from utils.maps import build_map_urls, get_maps_api_key, STATIC_MAP_URL, STREET_VIEW_URL


ADDRESS = "123 Main St, Fort Collins, CO"


class TestBuildMapUrls:
    def test_address_is_percent_encoded(self):
        urls = build_map_urls(ADDRESS, "K")

        encoded = "123%20Main%20St%2C%20Fort%20Collins%2C%20CO"
        assert f"center={encoded}" in urls.satellite_url
        assert f"location={encoded}" in urls.street_view_url
        assert "+" not in urls.satellite_url

    def test_key_is_literal(self):
        urls = build_map_urls(ADDRESS, "K")
        assert urls.satellite_url.endswith("key=K")
        assert urls.street_view_url.endswith("key=K")

    def test_satellite_parameters(self):
        urls = build_map_urls(ADDRESS, "K")
        assert urls.satellite_url.startswith(STATIC_MAP_URL + "?")

        params = parse_qs(urlparse(urls.satellite_url).query)
        assert params["center"] == [ADDRESS]
        assert params["zoom"] == ["20"]
        assert params["size"] == ["640x640"]
        assert params["maptype"] == ["satellite"]

    def test_street_view_parameters(self):
        urls = build_map_urls(ADDRESS, "K")
        assert urls.street_view_url.startswith(STREET_VIEW_URL + "?")

        params = parse_qs(urlparse(urls.street_view_url).query)
        assert params["location"] == [ADDRESS]
        assert params["fov"] == ["90"]
        assert params["pitch"] == ["0"]

    def test_surrounding_whitespace_trimmed(self):
        assert build_map_urls("  1 Elm St ", "K") == build_map_urls("1 Elm St", "K")

    @pytest.mark.parametrize("address", ["", "   ", None])
    def test_blank_address(self, address):
        with pytest.raises(ValueError):
            build_map_urls(address, "K")


class TestMapsApiKey:
    def test_unset(self):
        assert get_maps_api_key() is None

    def test_public_fallback(self, monkeypatch):
        monkeypatch.setenv("NEXT_PUBLIC_GOOGLE_MAPS_API_KEY", "pub")
        assert get_maps_api_key() == "pub"

    def test_server_key_wins(self, monkeypatch):
        monkeypatch.setenv("NEXT_PUBLIC_GOOGLE_MAPS_API_KEY", "pub")
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "srv")
        assert get_maps_api_key() == "srv"
