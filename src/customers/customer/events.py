"""Domain events for the Customer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from customers.domain import customers


@customers.event(part_of="Customer")
class CustomerRegistered:
    __version__ = 1

    customer_id = Identifier(required=True)
    email = String(required=True)
    first_name = String(required=True)
    last_name = String(required=True)
    registered_at = DateTime(required=True)


@customers.event(part_of="Customer")
class ProfileUpdated:
    __version__ = 1

    customer_id = Identifier(required=True)
    first_name = String(required=True)
    last_name = String(required=True)
    phone = String()


@customers.event(part_of="Customer")
class AddressAdded:
    __version__ = 1

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    city = String(required=True)
    country = String(required=True)
    is_default_shipping = Boolean(default=False)
    is_default_billing = Boolean(default=False)


@customers.event(part_of="Customer")
class AddressUpdated:
    __version__ = 1

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    is_default_shipping = Boolean(default=False)
    is_default_billing = Boolean(default=False)


@customers.event(part_of="Customer")
class AddressRemoved:
    __version__ = 1

    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)


@customers.event(part_of="Customer")
class CustomerSuspended:
    __version__ = 1

    customer_id = Identifier(required=True)
    reason = String(required=True)
    suspended_at = DateTime(required=True)


@customers.event(part_of="Customer")
class CustomerReactivated:
    __version__ = 1

    customer_id = Identifier(required=True)
    reactivated_at = DateTime(required=True)
