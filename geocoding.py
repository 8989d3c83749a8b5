"""
Geokodningsfunktioner för att konvertera mellan adresser och koordinater
"""

import logging
import time
from typing import Optional

import requests
import streamlit as st

from config import NOMINATIM_BASE_URL, CACHE_TTL, REQUEST_TIMEOUT, USER_AGENT
from models import Coordinate

logger = logging.getLogger(__name__)

NOMINATIM_DELAY = 1.0  # Nominatim tillåter ett anrop per sekund


@st.cache_data(ttl=CACHE_TTL)
def geocode_address(address: str) -> Optional[Coordinate]:
    """
    Geokoda en adress till koordinater

    Args:
        address: Adress att geokoda

    Returns:
        Coordinate eller None om adressen inte hittades
    """
    address = address.strip()
    if not address:
        return None

    url = f"{NOMINATIM_BASE_URL}/search"
    params = {
        "q": address,
        "format": "json",
        "limit": 1
    }
    headers = {"User-Agent": USER_AGENT}
    try:
        response = requests.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
        time.sleep(NOMINATIM_DELAY)

        if response.status_code == 200:
            data = response.json()
            if data:
                return Coordinate(float(data[0]["lat"]), float(data[0]["lon"]))
        else:
            logger.warning("Nominatim svarade %s för %r", response.status_code, address)
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("Geokodningsfel för %r: %s", address, e)
    return None
