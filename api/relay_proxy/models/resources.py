"""Resource names and link fields of the upstream API."""

from enum import Enum
from typing import Dict, FrozenSet


class ResourceName(str, Enum):
    """List resources served by the upstream API."""

    BOOKS = "books"
    CHARACTERS = "characters"
    HOUSES = "houses"


# Fields holding a list of resource URLs
LIST_LINK_FIELDS: Dict[ResourceName, FrozenSet[str]] = {
    ResourceName.BOOKS: frozenset({"characters", "povCharacters"}),
    ResourceName.CHARACTERS: frozenset({"allegiances", "books", "povBooks"}),
    ResourceName.HOUSES: frozenset({"cadetBranches", "swornMembers"}),
}


def is_list_link_field(resource: ResourceName, field: str) -> bool:
    return field in LIST_LINK_FIELDS[resource]
