"""Role-based access to dashboard resources."""

from typing import Dict, Iterable, Optional

from pydantic import BaseModel

DEVELOPER_ROLE = "ROLE_INT_DEVELOPER"

RESTRICTED_RESOURCES: Dict[str, str] = {
    "module_configs": DEVELOPER_ROLE,
    "topics": DEVELOPER_ROLE,
}


class AccessDecision(BaseModel):
    can: bool
    reason: Optional[str] = None


def can(resource: str, roles: Iterable[str]) -> AccessDecision:
    """Resources not listed in RESTRICTED_RESOURCES are open to everyone."""
    required = RESTRICTED_RESOURCES.get(resource)
    if required is None:
        return AccessDecision(can=True)
    if required in set(roles or []):
        return AccessDecision(can=True)
    return AccessDecision(can=False, reason=f"You need {required} to access this resource")
