"""
Factory Boy factories for payment test data.

Factories generate realistic test data while allowing easy customization.
FSM status fields are protected, so a non-default status is passed at
creation time rather than assigned afterwards.

Usage:
    from payments.tests.factories import (
        PaymentCardFactory,
        PaymentFactory,
        PayoutFactory,
        RefundFactory,
    )

    # A pending payment for a fresh booking
    payment = PaymentFactory()

    # A paid payment
    payment = PaymentFactory(paid=True)

    # A default bank account for a provider
    card = PaymentCardFactory(provider=provider)
"""

import uuid
from decimal import Decimal

import factory
from django.utils import timezone

from marketplace.tests.factories import BookingFactory
from payments.models import Payment, PaymentCard, Payout, Refund
from payments.state_machines import PaymentStatus, PayoutStatus, RefundStatus


class PaymentFactory(factory.django.DjangoModelFactory):
    """
    Factory for Payment.

    The amount and provider follow the booking. Use ``paid=True`` for a
    PAID payment with a gateway reference and paid_at set.
    """

    class Meta:
        model = Payment

    class Params:
        paid = factory.Trait(
            status=PaymentStatus.PAID,
            paid_at=factory.LazyFunction(timezone.now),
            gateway_reference=factory.LazyFunction(lambda: f"ref_{uuid.uuid4().hex[:12]}"),
        )

    booking = factory.SubFactory(BookingFactory)
    provider = factory.SelfAttribute("booking.provider")
    amount = factory.SelfAttribute("booking.quoted_total")
    status = PaymentStatus.PENDING


class PaymentCardFactory(factory.django.DjangoModelFactory):
    """Factory for a verified default bank account."""

    class Meta:
        model = PaymentCard

    provider = factory.SubFactory("marketplace.tests.factories.ProviderFactory")
    account_number = factory.Sequence(lambda n: f"{1000000000 + n}")
    account_name = factory.Faker("name")
    bank_code = "470010"
    bank_name = "Capitec Bank"
    recipient_code = factory.Sequence(lambda n: f"RCP_{n:06d}")
    is_default = True
    is_verified = True


class RefundFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Refund

    payment = factory.SubFactory(PaymentFactory, paid=True)
    amount = factory.SelfAttribute("payment.amount")
    gateway_ref = factory.Sequence(lambda n: f"{9000 + n}")
    status = RefundStatus.INITIATED


class PayoutFactory(factory.django.DjangoModelFactory):
    """
    Factory for Payout.

    Pass ``payments=[...]`` to link covered payments.
    """

    class Meta:
        model = Payout
        skip_postgeneration_save = True

    provider = factory.SubFactory("marketplace.tests.factories.ProviderFactory")
    payment_card = factory.SubFactory(
        PaymentCardFactory,
        provider=factory.SelfAttribute("..provider"),
    )
    amount = Decimal("450.00")
    status = PayoutStatus.PENDING
    reason = factory.LazyAttribute(lambda o: f"Payout for provider {o.provider.id}")

    @factory.post_generation
    def payments(self, create, extracted, **kwargs):
        if not create or not extracted:
            return
        self.payments.set(extracted)
