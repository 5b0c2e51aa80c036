"""
Tests for the claims viewer wiring.
"""

from src.notifications.dispatcher import NotificationDispatcher

import view_claims
from conftest import make_claim


def test_build_service_uses_a_real_dispatcher(claim_store, notification_store):
    service = view_claims.build_service(claim_store, notification_store)

    assert isinstance(service.dispatcher, NotificationDispatcher)
    assert service.dispatcher.notification_store is notification_store
    service.dispatcher.shutdown()


def test_built_service_reads_stored_claims(claim_store, notification_store, policy, employee):
    saved = claim_store.save(make_claim(policy, employee, amount=320.0))

    service = view_claims.build_service(claim_store, notification_store)

    assert service.get_claim_by_id(saved.id).amount == 320.0
    assert [c.id for c in service.get_claims_by_employee_id("EMP-001")] == [saved.id]
    service.dispatcher.shutdown()
