"""
auth/roles.py -- Closed role set and the fixed reachability table.

Roles are not ranked numerically. Each actor role maps to the exact set of
roles it may act as; anything absent from the table is denied:

    actor \\ required | employee | admin | trainer
    admin            |   yes    |  yes  |   yes
    trainer          |   yes    |  no   |   yes
    employee         |   yes    |  no   |   no

manager and guest are reserved values. They parse, but they have no row in
the table, so they reach nothing until the table is extended explicitly.

Layer rule: stdlib only.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    employee = "employee"
    admin = "admin"
    trainer = "trainer"
    # Reserved; no reachability row.
    manager = "manager"
    guest = "guest"

    @classmethod
    def parse(cls, value: object) -> Role | None:
        """Return the Role for a raw value, or None if it is not a known role."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# Roles that may be stored on a User record.
ASSIGNABLE_ROLES: frozenset[Role] = frozenset({Role.employee, Role.admin, Role.trainer})

_REACHABILITY: dict[Role, frozenset[Role]] = {
    Role.admin: frozenset({Role.employee, Role.admin, Role.trainer}),
    Role.trainer: frozenset({Role.employee, Role.trainer}),
    Role.employee: frozenset({Role.employee}),
}


def can_act(actor: Role | str | None, required: Role | str) -> bool:
    """Return True if a user holding `actor` may act where `required` is needed.

    Fails closed: an unknown, reserved, or missing actor role returns False,
    as does an unknown required role.
    """
    actor_role = Role.parse(actor)
    required_role = Role.parse(required)
    if actor_role is None or required_role is None:
        return False
    return required_role in _REACHABILITY.get(actor_role, frozenset())
