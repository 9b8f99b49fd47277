"""Crisis contacts and the personal safety plan."""

from __future__ import annotations

from mindspace.models._base import MindspaceBaseModel


class CrisisContact(MindspaceBaseModel):
    id: str
    name: str
    phone: str
    relationship: str = ""
    is_emergency: bool = False


class SafetyPlan(MindspaceBaseModel):
    """Singleton record, overwritten in place."""

    warning_signs: str = ""
    support_contacts: str = ""
    safe_places: str = ""
    coping_strategies: str = ""
    professional_contacts: str = ""
