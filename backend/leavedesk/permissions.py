"""Principals and the role capability table every operation is checked against."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .errors import AuthorizationError
from .models import RequestStatus, Role, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated actor. Passed explicitly into every service call."""

    id: int
    nome: str
    cognome: str
    email: str
    ruolo: Role

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            nome=user.nome,
            cognome=user.cognome,
            email=user.email,
            ruolo=Role(user.ruolo),
        )

    @property
    def is_manager(self) -> bool:
        return self.ruolo is Role.MANAGER


class Action(str, enum.Enum):
    CREATE_OWN_REQUEST = "create_own_request"
    CREATE_REQUEST_FOR_OTHERS = "create_request_for_others"
    VIEW_OWN_REQUESTS = "view_own_requests"
    VIEW_ALL_REQUESTS = "view_all_requests"
    EDIT_OWN_PENDING_REQUEST = "edit_own_pending_request"
    EDIT_ANY_PENDING_REQUEST = "edit_any_pending_request"
    DELETE_OWN_PENDING_REQUEST = "delete_own_pending_request"
    DELETE_ANY_REQUEST = "delete_any_request"
    EVALUATE_REQUEST = "evaluate_request"
    MANAGE_CATEGORIES = "manage_categories"
    VIEW_STATISTICS = "view_statistics"


_EMPLOYEE_ACTIONS = frozenset(
    {
        Action.CREATE_OWN_REQUEST,
        Action.VIEW_OWN_REQUESTS,
        Action.EDIT_OWN_PENDING_REQUEST,
        Action.DELETE_OWN_PENDING_REQUEST,
    }
)

CAPABILITIES: dict[Role, frozenset[Action]] = {
    Role.EMPLOYEE: _EMPLOYEE_ACTIONS,
    Role.MANAGER: _EMPLOYEE_ACTIONS
    | {
        Action.CREATE_REQUEST_FOR_OTHERS,
        Action.VIEW_ALL_REQUESTS,
        Action.EDIT_ANY_PENDING_REQUEST,
        Action.DELETE_ANY_REQUEST,
        Action.EVALUATE_REQUEST,
        Action.MANAGE_CATEGORIES,
        Action.VIEW_STATISTICS,
    },
}

# Actions limited to resources owned by the caller
_OWNED_ACTIONS = {
    Action.CREATE_OWN_REQUEST,
    Action.VIEW_OWN_REQUESTS,
    Action.EDIT_OWN_PENDING_REQUEST,
    Action.DELETE_OWN_PENDING_REQUEST,
}

# Actions limited to requests still awaiting evaluation
_PENDING_ACTIONS = {
    Action.EDIT_OWN_PENDING_REQUEST,
    Action.EDIT_ANY_PENDING_REQUEST,
    Action.DELETE_OWN_PENDING_REQUEST,
    Action.EVALUATE_REQUEST,
}


def authorize(principal: Principal, action: Action, resource: object | None = None) -> bool:
    """Return True when ``principal`` may perform ``action`` on ``resource``.

    ``resource`` is optional: without it only the role is checked. With it,
    ownership and pending-state constraints of the action are applied as well.
    Pure predicate, no side effects.
    """

    if action not in CAPABILITIES.get(principal.ruolo, frozenset()):
        return False
    if resource is None:
        return True
    if action in _OWNED_ACTIONS and getattr(resource, "utente_id", None) != principal.id:
        return False
    if action in _PENDING_ACTIONS and getattr(resource, "stato", None) is not RequestStatus.PENDING:
        return False
    return True


def require(
    principal: Principal,
    action: Action,
    resource: object | None = None,
    message: str | None = None,
) -> None:
    """Raise ``AuthorizationError`` unless ``authorize`` allows the action."""

    if not authorize(principal, action, resource):
        logger.warning(
            "Denied %s for user %s (%s)", action.value, principal.id, principal.ruolo.value
        )
        raise AuthorizationError(message or "Operation not permitted for this role")
