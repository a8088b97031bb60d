"""
Unit of Work Pattern

Wraps a database transaction, collects domain events from aggregates and
publishes them only after a successful commit. Side effects that live
outside the transaction register a compensation which runs after a
rollback.
"""

from typing import Callable, List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking.save()
            store.claim_table(table, booking)
            uow.add_compensation(lambda: store.release(booking))
            uow.collect_events(booking)
        # Events are published after commit, compensations run on rollback
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._compensations: List[Callable[[], None]] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        try:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
        finally:
            if exc_type is not None:
                self.rollback()
        return False

    def commit(self):
        """Schedule event publishing for after the database commit"""
        events = self._events.copy()
        self._events.clear()
        self._compensations.clear()
        logger.debug("Committing unit of work with %s events", len(events))
        if events:
            transaction.on_commit(lambda: self._publish_events(events), using=self.using)

    def rollback(self):
        """Discard events and run compensations, newest first"""
        logger.warning(
            "Rolling back unit of work, discarding %s events, running %s compensations",
            len(self._events),
            len(self._compensations),
        )
        self._events.clear()
        compensations = list(reversed(self._compensations))
        self._compensations.clear()
        for compensation in compensations:
            try:
                compensation()
            except Exception:
                logger.error("Compensation %r failed", compensation, exc_info=True)

    def add_compensation(self, compensation: Callable[[], None]):
        self._compensations.append(compensation)

    def collect_events(self, aggregate):
        """Move recorded events from the aggregate into the unit of work"""
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                "Collected %s events from %s (ID: %s)",
                len(new_events),
                aggregate.__class__.__name__,
                getattr(aggregate, 'pk', None),
            )

    def _publish_events(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info("Publishing %s domain events after commit", len(events))
        try:
            message_bus.publish_events(events)
        except Exception:
            # The booking is committed; event delivery is best effort
            logger.error("Error publishing events", exc_info=True)
