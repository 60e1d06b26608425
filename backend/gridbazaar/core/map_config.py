"""
Map Configuration

Hands the public Mapbox token to browsers, refusing secret tokens.
"""
from typing import Optional

from loguru import logger

from gridbazaar.config import settings
from gridbazaar.utils.exceptions import MapTokenNotConfiguredError, InvalidMapTokenError


PUBLIC_TOKEN_PREFIX = "pk."


def get_mapbox_config(token: Optional[str] = None) -> dict[str, str]:
    """
    Return ``{"mapboxToken": token}`` for a public token.
    
    Raises:
        MapTokenNotConfiguredError: no token configured
        InvalidMapTokenError: token is not a public (pk.*) token
    """
    token = settings.MAPBOX_PUBLIC_TOKEN if token is None else token
    if not token:
        logger.error("MAPBOX_PUBLIC_TOKEN is not configured")
        raise MapTokenNotConfiguredError()
    if not token.startswith(PUBLIC_TOKEN_PREFIX):
        logger.error("MAPBOX_PUBLIC_TOKEN is not a public token")
        raise InvalidMapTokenError()
    return {"mapboxToken": token}
