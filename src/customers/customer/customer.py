"""Customer aggregate root with Address entities."""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, String, ValueObject

from customers.customer.email import EmailAddress
from customers.domain import customers

MAX_ADDRESSES = 10

_ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "company",
    "address_line_1",
    "address_line_2",
    "city",
    "state",
    "postal_code",
    "country",
    "phone",
)


class CustomerStatus(Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


@customers.entity(part_of="Customer")
class Address:
    """A saved address; one may be the default shipping and one the default billing address."""

    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    company: String(max_length=255)
    address_line_1: String(required=True, max_length=255)
    address_line_2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100)
    phone: String(max_length=20)
    is_default_shipping: Boolean(default=False)
    is_default_billing: Boolean(default=False)


@customers.aggregate
class Customer:
    """A storefront shopper with a profile and an address book of up to ten entries."""

    email: ValueObject(EmailAddress, required=True)
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    phone: String(max_length=20)
    status: String(choices=CustomerStatus, default=CustomerStatus.ACTIVE.value)
    addresses: HasMany(Address)
    registered_at: DateTime()

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def at_most_one_default_of_each_kind(self):
        if len([a for a in self.addresses if a.is_default_shipping]) > 1:
            raise ValidationError({"addresses": ["Only one address can be the default shipping address"]})
        if len([a for a in self.addresses if a.is_default_billing]) > 1:
            raise ValidationError({"addresses": ["Only one address can be the default billing address"]})

    @classmethod
    def register(cls, email, first_name, last_name, phone=None):
        from customers.customer.events import CustomerRegistered

        now = datetime.now(UTC)
        normalized = email.strip().lower()
        customer = cls(
            email=EmailAddress(address=normalized),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            registered_at=now,
        )
        customer.raise_(
            CustomerRegistered(
                customer_id=customer.id,
                email=normalized,
                first_name=first_name,
                last_name=last_name,
                registered_at=now,
            )
        )
        return customer

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def update_profile(self, first_name=None, last_name=None, phone=None):
        from customers.customer.events import ProfileUpdated

        if first_name is not None:
            self.first_name = first_name
        if last_name is not None:
            self.last_name = last_name
        if phone is not None:
            self.phone = phone or None

        self.raise_(
            ProfileUpdated(
                customer_id=self.id,
                first_name=self.first_name,
                last_name=self.last_name,
                phone=self.phone,
            )
        )

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"address_id": [f"Address {address_id} not found"]})
        return address

    def _clear_defaults(self, shipping=False, billing=False):
        for address in self.addresses:
            if shipping and address.is_default_shipping:
                address.is_default_shipping = False
            if billing and address.is_default_billing:
                address.is_default_billing = False

    def add_address(self, is_default_shipping=False, is_default_billing=False, **fields):
        from customers.customer.events import AddressAdded

        # The first address becomes the default for both purposes
        if not self.addresses:
            is_default_shipping = is_default_billing = True

        with atomic_change(self):
            self._clear_defaults(shipping=is_default_shipping, billing=is_default_billing)
            address = Address(
                is_default_shipping=is_default_shipping,
                is_default_billing=is_default_billing,
                **{k: v for k, v in fields.items() if k in _ADDRESS_FIELDS},
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                customer_id=self.id,
                address_id=address.id,
                city=address.city,
                country=address.country,
                is_default_shipping=is_default_shipping,
                is_default_billing=is_default_billing,
            )
        )
        return address

    def update_address(self, address_id, is_default_shipping=None, is_default_billing=None, **fields):
        from customers.customer.events import AddressUpdated

        address = self._find_address(address_id)

        with atomic_change(self):
            for field, value in fields.items():
                if field in _ADDRESS_FIELDS and value is not None:
                    setattr(address, field, value)
            if is_default_shipping:
                self._clear_defaults(shipping=True)
                address.is_default_shipping = True
            if is_default_billing:
                self._clear_defaults(billing=True)
                address.is_default_billing = True

        self.raise_(
            AddressUpdated(
                customer_id=self.id,
                address_id=address.id,
                is_default_shipping=address.is_default_shipping,
                is_default_billing=address.is_default_billing,
            )
        )

    def remove_address(self, address_id):
        from customers.customer.events import AddressRemoved

        address = self._find_address(address_id)
        was_default_shipping = address.is_default_shipping
        was_default_billing = address.is_default_billing

        with atomic_change(self):
            self.remove_addresses(address)
            if self.addresses:
                if was_default_shipping:
                    self.addresses[0].is_default_shipping = True
                if was_default_billing:
                    self.addresses[0].is_default_billing = True

        self.raise_(AddressRemoved(customer_id=self.id, address_id=address_id))

    def default_shipping_address(self):
        return next((a for a in self.addresses if a.is_default_shipping), None)

    def default_billing_address(self):
        return next((a for a in self.addresses if a.is_default_billing), None)

    # -------------------------------------------------------------------
    # Account status
    # -------------------------------------------------------------------
    def suspend(self, reason):
        from customers.customer.events import CustomerSuspended

        if self.status != CustomerStatus.ACTIVE.value:
            raise ValidationError({"status": ["Only active customers can be suspended"]})

        self.status = CustomerStatus.SUSPENDED.value
        self.raise_(CustomerSuspended(customer_id=self.id, reason=reason, suspended_at=datetime.now(UTC)))

    def reactivate(self):
        from customers.customer.events import CustomerReactivated

        if self.status != CustomerStatus.SUSPENDED.value:
            raise ValidationError({"status": ["Only suspended customers can be reactivated"]})

        self.status = CustomerStatus.ACTIVE.value
        self.raise_(CustomerReactivated(customer_id=self.id, reactivated_at=datetime.now(UTC)))
