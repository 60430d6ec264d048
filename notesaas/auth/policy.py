"""Role-based access policy with note ownership.

Pure decision logic: callers pass in facts already loaded through
tenant-scoped queries and get back a ``Decision``. No I/O happens here.

Rules, in evaluation order:

1. A resource in another tenant is reported as *not found*, whatever the role.
2. Admins act tenant-wide, so ``*_OWN`` actions are always granted to them.
3. The action must be in the role's permission set.
4. For ``*_OWN`` actions the resource owner must be the caller.
"""

import uuid
from dataclasses import dataclass
from enum import StrEnum

from notesaas.auth.identity import Identity
from notesaas.core.errors import NotFoundError, PolicyError, PolicyReason
from notesaas.models.user import Role


class Action(StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST_ALL = "list_all"
    MANAGE_TENANT = "manage_tenant"
    UPGRADE_PLAN = "upgrade_plan"
    READ_OWN = "read_own"
    UPDATE_OWN = "update_own"
    DELETE_OWN = "delete_own"


# Own-scoped variant → the tenant-wide action it narrows.
OWN_ACTIONS: dict[Action, Action] = {
    Action.READ_OWN: Action.READ,
    Action.UPDATE_OWN: Action.UPDATE,
    Action.DELETE_OWN: Action.DELETE,
}

PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset({
        Action.CREATE,
        Action.READ,
        Action.UPDATE,
        Action.DELETE,
        Action.LIST_ALL,
        Action.MANAGE_TENANT,
        Action.UPGRADE_PLAN,
    }),
    Role.MEMBER: frozenset({
        Action.CREATE,
        Action.READ_OWN,
        Action.UPDATE_OWN,
        Action.DELETE_OWN,
    }),
}


def check_permission_table(table: dict[Role, frozenset[Action]]) -> None:
    """Raise ``RuntimeError`` unless every role has a permission row."""
    missing = set(Role) - set(table)
    if missing:
        raise RuntimeError(f"Roles without permissions: {sorted(missing)}")


# Runs on import, so an unmapped role stops the app from starting.
check_permission_table(PERMISSIONS)


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: PolicyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: PolicyReason) -> "Decision":
        return cls(allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed


def authorize(
    identity: Identity,
    action: Action,
    *,
    owner_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
) -> Decision:
    if tenant_id is not None and tenant_id != identity.tenant_id:
        return Decision.deny(PolicyReason.NOT_FOUND)

    if identity.role == Role.ADMIN and action in OWN_ACTIONS:
        return Decision.allow()

    if action not in PERMISSIONS[identity.role]:
        return Decision.deny(PolicyReason.INSUFFICIENT_PERMISSIONS)

    if action in OWN_ACTIONS and owner_id is not None and owner_id != identity.user_id:
        return Decision.deny(PolicyReason.ACCESS_DENIED)

    return Decision.allow()


def enforce(
    identity: Identity,
    action: Action,
    *,
    owner_id: uuid.UUID | None = None,
    tenant_id: uuid.UUID | None = None,
    resource: str = "Resource",
) -> None:
    """Raise the mapped error unless ``authorize`` allows the action."""
    decision = authorize(identity, action, owner_id=owner_id, tenant_id=tenant_id)
    if decision.allowed:
        return
    if decision.reason is PolicyReason.NOT_FOUND:
        raise NotFoundError(resource)
    raise PolicyError(decision.reason)  # type: ignore[arg-type]


def note_action(identity: Identity, verb: Action) -> Action:
    """Pick the action a caller exercises on notes for a tenant-wide verb.

    Admins get the verb itself, members get its ``*_OWN`` variant.
    """
    if identity.role == Role.ADMIN:
        return verb
    for own, wide in OWN_ACTIONS.items():
        if wide is verb:
            return own
    return verb


def owner_scope(identity: Identity) -> uuid.UUID | None:
    """Owner filter to hand to the data service: ``None`` means tenant-wide."""
    if identity.role == Role.ADMIN:
        return None
    return identity.user_id
