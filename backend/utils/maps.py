"""
Google Maps static image URLs for an address.

Pure string templating: no request is made here, the browser fetches
the URLs when it renders them.
"""

import os
from typing import Optional
from dataclasses import dataclass
from urllib.parse import urlencode, quote


STATIC_MAP_URL = "https://maps.googleapis.com/maps/api/staticmap"
STREET_VIEW_URL = "https://maps.googleapis.com/maps/api/streetview"

MAP_CONFIG = {
    "size": "640x640",
    "zoom": 20,
    "fov": 90,
    "pitch": 0,
}


@dataclass(frozen=True)
class MapUrls:
    satellite_url: str
    street_view_url: str


def get_maps_api_key() -> Optional[str]:
    return os.getenv("GOOGLE_MAPS_API_KEY") or os.getenv("NEXT_PUBLIC_GOOGLE_MAPS_API_KEY")


def _encode(params: dict) -> str:
    # quote (not quote_plus) so spaces become %20, matching encodeURIComponent
    return urlencode(params, quote_via=quote)


def build_map_urls(address: str, api_key: str) -> MapUrls:
    """
    Build satellite and street-view image URLs.

    Args:
        address: Free-text street address
        api_key: Maps API key, placed as a literal key= parameter

    Returns:
        MapUrls

    Raises:
        ValueError: address is blank
    """
    address = (address or "").strip()
    if not address:
        raise ValueError("Address is required")

    satellite = _encode({
        "center": address,
        "zoom": MAP_CONFIG["zoom"],
        "size": MAP_CONFIG["size"],
        "maptype": "satellite",
        "key": api_key,
    })
    street_view = _encode({
        "size": MAP_CONFIG["size"],
        "location": address,
        "fov": MAP_CONFIG["fov"],
        "pitch": MAP_CONFIG["pitch"],
        "key": api_key,
    })

    return MapUrls(
        satellite_url=f"{STATIC_MAP_URL}?{satellite}",
        street_view_url=f"{STREET_VIEW_URL}?{street_view}",
    )
