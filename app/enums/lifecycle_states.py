from enum import Enum
from types import MappingProxyType


class LifecycleState(str, Enum):
    draft = "draft"
    pending_approval = "pending_approval"
    approved = "approved"
    active = "active"
    discontinued = "discontinued"
    archived = "archived"


# state -> states reachable in one step; archived is terminal
ALLOWED_TRANSITIONS = MappingProxyType({
    LifecycleState.draft: frozenset({LifecycleState.pending_approval, LifecycleState.archived}),
    LifecycleState.pending_approval: frozenset({LifecycleState.approved, LifecycleState.draft}),
    LifecycleState.approved: frozenset({LifecycleState.active}),
    LifecycleState.active: frozenset({LifecycleState.discontinued}),
    LifecycleState.discontinued: frozenset({LifecycleState.active, LifecycleState.archived}),
    LifecycleState.archived: frozenset(),
})


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
