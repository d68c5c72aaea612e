"""Customer registration: command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from customers.customer.customer import Customer
from customers.domain import customers


@customers.command(part_of="Customer")
class RegisterCustomer:
    email: String(required=True, max_length=254)
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    phone: String(max_length=20)


@customers.command_handler(part_of=Customer)
class RegisterCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)

        email = command.email.strip().lower()
        # EmailAddress is stored flattened as email_address
        if repo._dao.query.filter(email_address=email).all().first:
            raise ValidationError({"email": [f"A customer with email {email} is already registered"]})

        customer = Customer.register(
            email=email,
            first_name=command.first_name,
            last_name=command.last_name,
            phone=command.phone,
        )
        repo.add(customer)
        return str(customer.id)
