"""Account status changes: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from customers.customer.customer import Customer
from customers.domain import customers


@customers.command(part_of="Customer")
class SuspendCustomer:
    customer_id: Identifier(required=True)
    reason: String(required=True, max_length=500)


@customers.command(part_of="Customer")
class ReactivateCustomer:
    customer_id: Identifier(required=True)


@customers.command_handler(part_of=Customer)
class AccountHandler:
    @handle(SuspendCustomer)
    def suspend_customer(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.suspend(command.reason)
        repo.add(customer)

    @handle(ReactivateCustomer)
    def reactivate_customer(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.reactivate()
        repo.add(customer)
