"""Cart item management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering
from ordering.errors import CartNotFoundError


@ordering.command(part_of="Cart")
class AddCartItem:
    cart_id = Identifier(required=True)
    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    price = Float(required=True)
    quantity = Integer(required=True)
    image = String(max_length=1000)
    category = String(max_length=100)


@ordering.command(part_of="Cart")
class UpdateCartItemQuantity:
    cart_id = Identifier(required=True)
    product_id = String(required=True, max_length=255)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class RemoveCartItem:
    cart_id = Identifier(required=True)
    product_id = String(required=True, max_length=255)


def load_cart(cart_id):
    try:
        return current_domain.repository_for(Cart).get(cart_id)
    except ObjectNotFoundError as exc:
        raise CartNotFoundError(f"Cart {cart_id} not found", context={"cart_id": str(cart_id)}) from exc


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddCartItem)
    def add_cart_item(self, command):
        cart = load_cart(command.cart_id)
        cart.add_item(
            product_id=command.product_id,
            name=command.name,
            price=command.price,
            quantity=command.quantity,
            image=command.image,
            category=command.category,
        )
        current_domain.repository_for(Cart).add(cart)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        cart = load_cart(command.cart_id)
        cart.update_item_quantity(product_id=command.product_id, quantity=command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = load_cart(command.cart_id)
        cart.remove_item(product_id=command.product_id)
        current_domain.repository_for(Cart).add(cart)
