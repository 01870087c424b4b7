"""
Factory Boy factories for booking test data.

Usage:
    from bookings.tests.factories import FieldFactory, ReservationFactory

    # Reservation on a Wave-paid field, priced at 10 000 XOF
    reservation = ReservationFactory(total_price=10_000)

    # Field paid out through PayDunya PUSH
    field = FieldFactory(owner_payout_channel=PayoutChannel.PAYDUNYA_PUSH)
"""

import datetime

import factory

from bookings.models import Field, Reservation
from payments.state_machines import PayoutChannel


class UserFactory(factory.django.DjangoModelFactory):
    """Factory for django.contrib.auth users (players, owners, staff)."""

    class Meta:
        model = "auth.User"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "testpass123")
    is_active = True


class FieldFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Field instances.

    Default creates a field paid out through Wave with a valid Senegal
    wallet and the default 10% commission.
    """

    class Meta:
        model = Field

    name = factory.Sequence(lambda n: f"Terrain {n}")
    location = "Dakar"
    price_per_hour = 15000
    owner_payout_channel = PayoutChannel.WAVE
    owner_mobile_e164 = "+221771234567"
    commission_rate_bps = 1000


class ReservationFactory(factory.django.DjangoModelFactory):
    """Factory for creating unpaid Reservation instances."""

    class Meta:
        model = Reservation

    user = factory.SubFactory(UserFactory)
    field = factory.SubFactory(FieldFactory)
    reservation_date = factory.LazyFunction(lambda: datetime.date.today() + datetime.timedelta(days=3))
    start_time = datetime.time(18, 0)
    duration_hours = 1
    total_price = 10000
