"""
IRIs identify items across the API, e.g. "/api/conferences/3".
Relations are written and read as IRIs instead of raw ids.
"""

import re

from core.exceptions import InvalidIriError

API_PREFIX = "/api"

# short name -> collection path
RESOURCE_PATHS = {
    "commentaire": f"{API_PREFIX}/commentaires",
    "conference": f"{API_PREFIX}/conferences",
}


def collection_iri(short_name: str) -> str:
    return RESOURCE_PATHS[short_name]


def item_iri(short_name: str, item_id: int) -> str:
    return f"{RESOURCE_PATHS[short_name]}/{item_id}"


def parse_item_iri(short_name: str, iri: str) -> int:
    """
    Extract the id from an item IRI of the given resource.
    Raises InvalidIriError if the IRI belongs to another resource or is malformed.
    """
    pattern = rf"^{re.escape(RESOURCE_PATHS[short_name])}/(\d+)$"
    match = re.match(pattern, iri.strip())
    if not match:
        raise InvalidIriError(iri)
    return int(match.group(1))
