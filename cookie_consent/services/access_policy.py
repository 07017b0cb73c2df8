"""
Field-level access policy

Decides which fields a caller may create or read on each resource. Writes
are trimmed silently: a field the caller may not create is dropped from the
values before insert and never raises.
"""

import logging
from collections.abc import Mapping
from typing import Any

from cookie_consent.auth import CallerContext
from cookie_consent.constants.user_types import UserType

logger = logging.getLogger(__name__)

# resource name -> allowed field names; a resource missing from the map allows every field
FieldMap = Mapping[str, frozenset[str]]


class FieldAccessPolicy:
    """
    Per-user-type field access rules.

    Usage::

        policy = FieldAccessPolicy(creatable={UserType.GUEST: {"person": frozenset({"browser_id"})}})
        values = policy.strip_inaccessible("person", {"browser_id": "b1", "account_id": 7}, caller)
        # -> {"browser_id": "b1"}
    """

    def __init__(
        self,
        creatable: Mapping[UserType, FieldMap] | None = None,
        readable: Mapping[UserType, FieldMap] | None = None,
    ):
        self.creatable = creatable or {}
        self.readable = readable or {}

    def strip_inaccessible(self, resource: str, values: dict[str, Any], caller: CallerContext) -> dict[str, Any]:
        """Return ``values`` without the fields the caller may not create."""
        return self._filter(self.creatable, "create", resource, values, caller)

    def redact(self, resource: str, values: dict[str, Any], caller: CallerContext) -> dict[str, Any]:
        """Return ``values`` without the fields the caller may not read."""
        return self._filter(self.readable, "read", resource, values, caller)

    def _filter(
        self,
        rules: Mapping[UserType, FieldMap],
        action: str,
        resource: str,
        values: dict[str, Any],
        caller: CallerContext,
    ) -> dict[str, Any]:
        allowed = rules.get(caller.user_type, {}).get(resource)
        if allowed is None:
            return dict(values)

        kept = {key: value for key, value in values.items() if key in allowed}
        dropped = sorted(set(values) - set(kept))
        if dropped:
            logger.debug(
                "Dropped %s fields on %s for %s caller: %s",
                action,
                resource,
                caller.user_type.value,
                ", ".join(dropped),
            )
        return kept


# Anonymous callers may only key a person by browser ID
_ANONYMOUS_PERSON_FIELDS = frozenset({"browser_id"})

default_policy = FieldAccessPolicy(
    creatable={
        UserType.GUEST: {"person": _ANONYMOUS_PERSON_FIELDS},
        UserType.AUTOMATED: {"person": _ANONYMOUS_PERSON_FIELDS},
    },
)


def get_access_policy() -> FieldAccessPolicy:
    """FastAPI dependency returning the active access policy."""
    return default_policy
