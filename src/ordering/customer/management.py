"""Customer management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.customer.customer import Customer
from ordering.domain import ordering
from ordering.errors import CustomerNotFoundError


@ordering.command(part_of="Customer")
class RegisterCustomer:
    name = String(required=True, max_length=200)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)


@ordering.command(part_of="Customer")
class SuspendCustomer:
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command(part_of="Customer")
class DeactivateCustomer:
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command(part_of="Customer")
class BlockCustomer:
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command(part_of="Customer")
class ReactivateCustomer:
    customer_id = Identifier(required=True)


def load_customer(customer_id):
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError as exc:
        raise CustomerNotFoundError(
            f"Customer {customer_id} not found",
            context={"customer_id": str(customer_id)},
        ) from exc


@ordering.command_handler(part_of=Customer)
class ManageCustomerHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        customer = Customer.register(name=command.name, email=command.email, phone=command.phone)
        current_domain.repository_for(Customer).add(customer)
        return str(customer.id)

    @handle(SuspendCustomer)
    def suspend_customer(self, command):
        customer = load_customer(command.customer_id)
        customer.suspend(reason=command.reason)
        current_domain.repository_for(Customer).add(customer)

    @handle(DeactivateCustomer)
    def deactivate_customer(self, command):
        customer = load_customer(command.customer_id)
        customer.deactivate(reason=command.reason)
        current_domain.repository_for(Customer).add(customer)

    @handle(BlockCustomer)
    def block_customer(self, command):
        customer = load_customer(command.customer_id)
        customer.block(reason=command.reason)
        current_domain.repository_for(Customer).add(customer)

    @handle(ReactivateCustomer)
    def reactivate_customer(self, command):
        customer = load_customer(command.customer_id)
        customer.reactivate()
        current_domain.repository_for(Customer).add(customer)
