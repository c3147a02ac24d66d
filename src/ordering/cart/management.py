"""Cart management: commands and handler.

Handles cart creation, discounts, tax and clearing.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.items import load_cart
from ordering.domain import ordering


@ordering.command(part_of="Cart")
class CreateCart:
    """Open a cart for a registered customer or an anonymous session."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@ordering.command(part_of="Cart")
class ApplyCartDiscount:
    cart_id = Identifier(required=True)
    amount = Float(required=True)


@ordering.command(part_of="Cart")
class ApplyCartTax:
    cart_id = Identifier(required=True)
    amount = Float(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(customer_id=command.customer_id, session_id=command.session_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ApplyCartDiscount)
    def apply_discount(self, command):
        cart = load_cart(command.cart_id)
        cart.apply_discount(command.amount)
        current_domain.repository_for(Cart).add(cart)

    @handle(ApplyCartTax)
    def apply_tax(self, command):
        cart = load_cart(command.cart_id)
        cart.apply_tax(command.amount)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.cart_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
