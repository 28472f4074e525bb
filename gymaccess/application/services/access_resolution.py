"""Access resolution: may this member use this zone right now?

Rules are layered and evaluated as an ordered chain. Each resolver returns
a tagged AccessDecision; the chain falls through only on NOT_FOUND:

    1. Active member override (valid_from <= at, valid_until null or >= at)
    2. Permission of the member's active membership for the zone
    3. Nothing matched: denied (fail closed)

Scheduled rules grant access iff the weekday of `at` is in the schedule's
days and its time of day lies in [start, end] (inclusive, minute
granularity). `at` is a branch-local wall clock; no timezone conversion is
applied.

Resolution is read-only and safe to run concurrently.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from gymaccess.domain.entities import AccessSchedule
from gymaccess.domain.enums import AccessDecision
from gymaccess.domain.protocols import AccessStoreProtocol


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessRuleMatch:
    """Outcome of one resolver in the chain.

    Attributes:
        decision: allowed / denied / scheduled / not_found.
        schedule: Schedule to evaluate for scheduled decisions.
        source: Which layer produced the decision (for debugging).
    """

    decision: AccessDecision
    schedule: AccessSchedule | None = None
    source: str | None = None


NO_MATCH = AccessRuleMatch(decision=AccessDecision.NOT_FOUND)

RuleResolver = Callable[[UUID, UUID, datetime], Awaitable[AccessRuleMatch]]


class AccessResolver:
    """Ordered resolver chain over AccessStoreProtocol.

    Dependencies (injected via constructor):
        - AccessStoreProtocol: overrides, memberships, zones, doors

    Example:
        >>> resolver = AccessResolver(store=store)
        >>> await resolver.has_zone_access(member_id, zone_id)
        True
    """

    def __init__(
        self,
        *,
        store: AccessStoreProtocol,
        resolvers: list[RuleResolver] | None = None,
    ) -> None:
        self._store = store
        self._resolvers: list[RuleResolver] = resolvers or [
            self.override_rule,
            self.membership_rule,
        ]

    async def resolve(
        self,
        member_id: UUID,
        zone_id: UUID,
        *,
        at: datetime | None = None,
    ) -> AccessRuleMatch:
        """First non-NOT_FOUND match of the chain, or NO_MATCH."""
        moment = at or _local_now()
        for resolver in self._resolvers:
            match = await resolver(member_id, zone_id, moment)
            if match.decision is not AccessDecision.NOT_FOUND:
                return match
        return NO_MATCH

    async def has_zone_access(
        self,
        member_id: UUID,
        zone_id: UUID,
        *,
        at: datetime | None = None,
    ) -> bool:
        """Whether the member may enter the zone at `at` (default: now, local).

        Args:
            member_id: Member to check.
            zone_id: Zone to check.
            at: Branch-local wall clock moment.

        Returns:
            True only for allowed rules and scheduled rules inside their
            window. Denied, unmatched and incomplete schedules are False.
        """
        moment = at or _local_now()
        match = await self.resolve(member_id, zone_id, at=moment)
        return evaluate(match, moment)

    async def accessible_door_ids(
        self,
        member_id: UUID,
        branch_id: UUID,
        *,
        at: datetime | None = None,
    ) -> list[str]:
        """Vendor door ids of every active door in zones the member may use.

        Returns:
            Unique vendor door ids in zone order.
        """
        moment = at or _local_now()
        door_ids: list[str] = []
        for zone in await self._store.list_zones(branch_id):
            if not await self.has_zone_access(member_id, zone.id, at=moment):
                continue
            for door in await self._store.list_active_doors(branch_id, zone.id):
                if door.vendor_door_id not in door_ids:
                    door_ids.append(door.vendor_door_id)
        return door_ids

    # =========================================================================
    # Resolvers
    # =========================================================================

    async def override_rule(
        self,
        member_id: UUID,
        zone_id: UUID,
        at: datetime,
    ) -> AccessRuleMatch:
        override = await self._store.find_active_override(member_id, zone_id, at)
        if override is None or not override.is_active_at(at):
            return NO_MATCH
        return AccessRuleMatch(
            decision=AccessDecision.from_access_type(override.access_type),
            schedule=override.schedule,
            source="override",
        )

    async def membership_rule(
        self,
        member_id: UUID,
        zone_id: UUID,
        at: datetime,
    ) -> AccessRuleMatch:
        membership = await self._store.find_active_membership(member_id)
        if membership is None:
            return NO_MATCH
        permission = await self._store.find_membership_permission(
            membership.membership_id, zone_id
        )
        if permission is None:
            return NO_MATCH
        return AccessRuleMatch(
            decision=AccessDecision.from_access_type(permission.access_type),
            schedule=permission.schedule,
            source="membership",
        )


def evaluate(match: AccessRuleMatch, at: datetime) -> bool:
    if match.decision is AccessDecision.ALLOWED:
        return True
    if match.decision is AccessDecision.SCHEDULED:
        return match.schedule is not None and match.schedule.includes(at)
    return False


def _local_now() -> datetime:
    return datetime.now().astimezone()
