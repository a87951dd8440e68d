"""
ORM-Level Immutability Enforcement for the movement ledger (Layer 1 of 2).

===============================================================================
WHY THIS EXISTS
===============================================================================

The movement ledger is the audit trail for every quantity change.  A product's
on-hand quantity must always be explainable by its ledger rows, so those rows
cannot be edited or removed once written.  Corrections are new movements.

  Layer 1: THIS FILE (ORM event listeners)
    - Catches modifications through Python/SQLAlchemy code
    - Fires BEFORE the SQL is sent to the database

  Layer 2: db/sql/01_movement_record.sql (PostgreSQL triggers)
    - Catches raw SQL, bulk UPDATE/DELETE statements, direct psql access

===============================================================================
HOW IT WORKS
===============================================================================

    session.flush()
         |
         v
    [before_update event] --> _check_movement_record_immutability() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _check_movement_record_delete() --------> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)
"""

from sqlalchemy import event

from stock_kernel.exceptions import ImmutabilityViolationError
from stock_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_movement_record_immutability(mapper, connection, target):
    """Prevent any updates to MovementRecord rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "MovementRecord",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="MovementRecord",
        entity_id=str(target.id),
        reason="Movement records are immutable and cannot be modified",
    )


def _check_movement_record_delete(mapper, connection, target):
    """Prevent deletion of MovementRecord rows."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "MovementRecord",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="MovementRecord",
        entity_id=str(target.id),
        reason="Movement records cannot be deleted",
    )


def register_immutability_listeners():
    """
    Register the ledger immutability listeners.

    Call during application initialization, before any database
    operations begin.  Safe to call more than once.
    """
    from stock_kernel.models.movement import MovementRecord

    if not event.contains(MovementRecord, "before_update", _check_movement_record_immutability):
        event.listen(MovementRecord, "before_update", _check_movement_record_immutability)
    if not event.contains(MovementRecord, "before_delete", _check_movement_record_delete):
        event.listen(MovementRecord, "before_delete", _check_movement_record_delete)


def _safe_remove_listener(target, event_name, listener_fn):
    """Remove an event listener, ignoring it if not registered."""
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove the ledger immutability listeners.

    WARNING: Only use this in tests that intentionally violate the rules.
    """
    from stock_kernel.models.movement import MovementRecord

    _safe_remove_listener(MovementRecord, "before_update", _check_movement_record_immutability)
    _safe_remove_listener(MovementRecord, "before_delete", _check_movement_record_delete)
