"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import (
        CustomerFactory,
        ProviderUserFactory,
        AdminUserFactory,
    )

    customer = CustomerFactory()
    provider_user = ProviderUserFactory(first_name="Sipho")
    suspended = CustomerFactory(status=UserStatus.SUSPENDED)
"""

import factory

from authentication.models import User, UserRole, UserStatus


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Users are ACTIVE customers unless told otherwise.
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    role = UserRole.CUSTOMER
    status = UserStatus.ACTIVE
    is_active = True
    is_staff = False

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class CustomerFactory(UserFactory):
    email = factory.Sequence(lambda n: f"customer{n}@example.com")
    role = UserRole.CUSTOMER


class ProviderUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f"provider{n}@example.com")
    role = UserRole.PROVIDER


class AdminUserFactory(UserFactory):
    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    role = UserRole.ADMIN
    is_staff = True
