"""Address book: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from customers.customer.customer import Customer
from customers.domain import customers


@customers.command(part_of="Customer")
class AddAddress:
    customer_id: Identifier(required=True)
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


@customers.command(part_of="Customer")
class UpdateAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    company: String(max_length=255)
    address_line_1: String(max_length=255)
    address_line_2: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)
    phone: String(max_length=20)
    is_default_shipping: Boolean()
    is_default_billing: Boolean()


@customers.command(part_of="Customer")
class RemoveAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


_ADDRESS_ATTRIBUTES = (
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


def _address_fields(command):
    return {name: getattr(command, name) for name in _ADDRESS_ATTRIBUTES}


@customers.command_handler(part_of=Customer)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        address = customer.add_address(
            is_default_shipping=command.is_default_shipping,
            is_default_billing=command.is_default_billing,
            **_address_fields(command),
        )
        repo.add(customer)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.update_address(
            command.address_id,
            is_default_shipping=command.is_default_shipping,
            is_default_billing=command.is_default_billing,
            **_address_fields(command),
        )
        repo.add(customer)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.remove_address(command.address_id)
        repo.add(customer)
