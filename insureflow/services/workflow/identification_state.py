"""Decisions driven by the stored status of a client identification.

Consuming workflows never change an identification's status; they read it
and pick one of three reuse actions. Status changes come only from the
identification side (provider callbacks) and must follow ``TRANSITIONS``.
"""

from enum import Enum
from typing import Dict, FrozenSet, Union

from insureflow.core.exceptions import InvalidStatusTransitionError, UnexpectedIdentificationStatusError
from insureflow.schemas.enums import IdentificationStatus


class ReuseAction(str, Enum):
    """What to do with an existing identification when a new reference arrives."""
    ATTACH = "attach"
    ATTACH_AND_NOTIFY = "attach_and_notify"
    START_NEW = "start_new"


REUSE_ACTIONS: Dict[IdentificationStatus, ReuseAction] = {
    IdentificationStatus.NEW: ReuseAction.ATTACH,
    IdentificationStatus.IN_PROGRESS: ReuseAction.ATTACH,
    IdentificationStatus.IDENTIFIED: ReuseAction.ATTACH_AND_NOTIFY,
    IdentificationStatus.NOT_IDENTIFIED: ReuseAction.START_NEW,
    IdentificationStatus.ERROR: ReuseAction.START_NEW,
}

TRANSITIONS: Dict[IdentificationStatus, FrozenSet[IdentificationStatus]] = {
    IdentificationStatus.NEW: frozenset({
        IdentificationStatus.IN_PROGRESS,
        IdentificationStatus.IDENTIFIED,
        IdentificationStatus.NOT_IDENTIFIED,
        IdentificationStatus.ERROR,
    }),
    IdentificationStatus.IN_PROGRESS: frozenset({
        IdentificationStatus.IDENTIFIED,
        IdentificationStatus.NOT_IDENTIFIED,
        IdentificationStatus.ERROR,
    }),
    IdentificationStatus.IDENTIFIED: frozenset(),
    IdentificationStatus.NOT_IDENTIFIED: frozenset(),
    IdentificationStatus.ERROR: frozenset(),
}

# Adding a status without deciding how it is handled must fail loudly
for _table in (REUSE_ACTIONS, TRANSITIONS):
    _unhandled = set(IdentificationStatus) - set(_table)
    if _unhandled:
        raise RuntimeError(f"Identification statuses without a decision: {sorted(_unhandled)}")


def parse_status(raw: Union[str, IdentificationStatus]) -> IdentificationStatus:
    """Convert a stored status value into ``IdentificationStatus``.

    Raises:
        UnexpectedIdentificationStatusError: For any value outside the five states
    """
    try:
        return IdentificationStatus(raw)
    except ValueError as e:
        raise UnexpectedIdentificationStatusError(raw) from e


def decide_reuse(raw_status: Union[str, IdentificationStatus]) -> ReuseAction:
    """Pick the reuse action for an identification in ``raw_status``."""
    return REUSE_ACTIONS[parse_status(raw_status)]


def is_identified(raw_status: Union[str, IdentificationStatus]) -> bool:
    return parse_status(raw_status) is IdentificationStatus.IDENTIFIED


def ensure_transition(
    current: Union[str, IdentificationStatus],
    target: Union[str, IdentificationStatus],
) -> IdentificationStatus:
    """Validate a status change and return the target status.

    Raises:
        InvalidStatusTransitionError: If ``target`` is not reachable from ``current``
    """
    current_status = parse_status(current)
    try:
        target_status = IdentificationStatus(target)
    except ValueError as e:
        raise InvalidStatusTransitionError(current_status.value, str(target)) from e
    if target_status not in TRANSITIONS[current_status]:
        raise InvalidStatusTransitionError(current_status.value, target_status.value)
    return target_status
