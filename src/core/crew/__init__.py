"""조직원 Core — 순수 Python, DB 무관"""

from .models import CrewMember, PartyResources, TraitEntry
from .traits import TraitCatalog, TraitDefinition, grant_trait

__all__ = [
    "CrewMember",
    "PartyResources",
    "TraitEntry",
    "TraitCatalog",
    "TraitDefinition",
    "grant_trait",
]
