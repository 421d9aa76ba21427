"""
Pytest fixtures for payment tests.

The gateway is replaced by a MagicMock shared by every payment service,
so tests configure return values and side effects per call and assert
on what was sent. Refund polls are never actually queued.

Usage:
    def test_refund(gateway, paid_payment):
        gateway.create_refund.return_value = RefundResult(reference="9001", status="pending")
        refund, created = RefundService.initiate_refund(paid_payment.id)
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from payments.adapters import (
    PaystackAdapter,
    RefundResult,
    TransactionInitResult,
    TransactionVerifyResult,
    TransferRecipientResult,
    TransferResult,
)
from payments.services import (
    PaymentCardService,
    PaymentService,
    PayoutService,
    RefundService,
)
from payments.tests.factories import PaymentCardFactory, PaymentFactory

SERVICES = (PaymentService, PaymentCardService, PayoutService, RefundService)


# =============================================================================
# Gateway
# =============================================================================


@pytest.fixture
def gateway():
    """
    Mock gateway installed on all payment services.

    Defaults describe a happy path; override per test.
    """
    mock = MagicMock(spec=PaystackAdapter)
    mock.initialize_transaction.side_effect = lambda email, amount, reference, metadata=None: (
        TransactionInitResult(
            authorization_url=f"https://checkout.paystack.com/{reference}",
            access_code="access_123",
            reference=reference,
            raw_response={"reference": reference},
        )
    )
    mock.verify_transaction.return_value = TransactionVerifyResult(
        status="success",
        amount=Decimal("500.00"),
        reference="ref",
        paid_at="2026-03-06T10:00:00Z",
    )
    mock.create_transfer_recipient.return_value = TransferRecipientResult(
        recipient_code="RCP_test123",
        account_name="SIPHO MOVERS",
    )
    mock.create_transfer.return_value = TransferResult(
        transfer_code="TRF_test123",
        reference="po_ref",
        status="pending",
    )
    mock.create_refund.return_value = RefundResult(reference="9001", status="pending")
    mock.fetch_refund.return_value = RefundResult(reference="9001", status="pending")
    mock.verify_webhook_signature.return_value = True

    for service in SERVICES:
        service.set_gateway(mock)
    yield mock
    for service in SERVICES:
        service.set_gateway(None)


@pytest.fixture(autouse=True)
def mock_poll_enqueue(mocker):
    """Keep refund polls out of the broker."""
    return mocker.patch("payments.tasks.poll_refund_status.apply_async")


# =============================================================================
# Payment Fixtures
# =============================================================================


@pytest.fixture
def booking(customer, provider):
    """Confirmed 500.00 booking of the customer with the provider."""
    from marketplace.tests.factories import BookingFactory

    return BookingFactory(customer=customer, provider=provider)


@pytest.fixture
def pending_payment(booking):
    return PaymentFactory(booking=booking)


@pytest.fixture
def paid_payment(booking):
    payment = PaymentFactory(booking=booking, paid=True)
    payment.sync_booking()
    return payment


@pytest.fixture
def default_card(provider):
    """Default bank account with a transfer recipient."""
    return PaymentCardFactory(provider=provider)
