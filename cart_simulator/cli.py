"""
Terminal menu for the cart simulator.

Runs against the same JSON-backed stores as the API. The cart shown is the
one owned by the configured default user, created on first use.
"""

import argparse
import logging
import sys
from typing import Callable, Optional

from dotenv import load_dotenv

from .core.config import get_settings
from .core.context import AppContext, build_context
from .core.logs import setup_logging
from .database.storage import StorageError
from .models.cart import ShoppingCart
from .models.product import Product

logger = logging.getLogger(__name__)

MENU_OPTIONS = [
    ("1", "View product catalog"),
    ("2", "Search products"),
    ("3", "View cart"),
    ("4", "Add product to cart"),
    ("5", "Change quantity in cart"),
    ("6", "Remove item from cart"),
    ("7", "View available coupons"),
    ("8", "Apply discount coupon"),
    ("9", "Calculate shipping"),
    ("10", "Checkout"),
    ("11", "Clear cart"),
    ("0", "Exit"),
]


def money(value: float) -> str:
    return f"R$ {value:.2f}"


class CartSimulatorCLI:
    """Menu loop reading from input_func and writing with print"""

    def __init__(self, context: AppContext, input_func: Callable[[str], str] = input):
        self.context = context
        self.input = input_func
        self.cart = self._load_cart()

    def _load_cart(self) -> ShoppingCart:
        user_id = self.context.settings.default_user_id
        cart = self.context.carts.get_cart_by_user(user_id)
        if cart is None:
            cart = self.context.carts.create_cart(user_id)
            logger.info(f"Created cart {cart.id} for {user_id}")
        return cart

    def ask(self, prompt: str) -> str:
        return self.input(prompt).strip()

    def ask_int(self, prompt: str) -> Optional[int]:
        answer = self.ask(prompt)
        try:
            return int(answer)
        except ValueError:
            print(f"✗ '{answer}' is not a number")
            return None

    # ==================== Menu ====================

    def run(self) -> None:
        print("=" * 60)
        print(self.context.settings.app_name)
        print("=" * 60)

        actions = {
            "1": self.show_catalog,
            "2": self.search_products,
            "3": self.show_cart,
            "4": self.add_product,
            "5": self.change_quantity,
            "6": self.remove_item,
            "7": self.show_coupons,
            "8": self.apply_coupon,
            "9": self.calculate_shipping,
            "10": self.checkout,
            "11": self.clear_cart,
        }

        while True:
            self.show_menu()
            try:
                choice = self.ask("Choose an option: ")
            except EOFError:
                choice = "0"

            if choice == "0":
                print("\nThanks for shopping. Goodbye!")
                return

            action = actions.get(choice)
            if action is None:
                print("✗ Invalid option")
                continue

            action()

    def show_menu(self) -> None:
        if not self.cart.is_empty:
            print(f"\n🛒 Cart: {self.cart.total_items} item(s) - Total: {money(self.cart.total)}")
        print()
        for key, label in MENU_OPTIONS:
            print(f"  {key:>2}. {label}")

    # ==================== Catalog ====================

    def print_product(self, product: Product) -> None:
        price = money(product.final_price)
        if product.has_discount:
            price += f" (was {money(product.price)}, -{product.discount:g}%)"
        stock = f"{product.stock} in stock" if product.stock > 0 else "out of stock"
        print(f"  [{product.id}] {product.name} - {price} - {stock}")

    def show_catalog(self) -> None:
        print("\n📋 Product catalog")
        for category in self.context.products.get_categories():
            print(f"\n{category}")
            for product in self.context.products.get_products_by_category(category):
                self.print_product(product)

    def search_products(self) -> None:
        query = self.ask("Search for: ")
        products, total = self.context.products.search_products(query=query)
        print(f"\n🔍 {total} product(s) found")
        for product in products:
            self.print_product(product)

    # ==================== Cart ====================

    def show_cart(self) -> None:
        if self.cart.is_empty:
            print("\n🛒 Your cart is empty")
            return

        print("\n🛒 Your cart")
        for item in self.cart.items:
            print(
                f"  [{item.product.id}] {item.product.name} x{item.quantity} "
                f"@ {money(item.product.final_price)} = {money(item.subtotal)}"
            )

        summary = self.cart.financial_summary()
        print(f"\n  Subtotal:          {money(summary.original_subtotal)}")
        if summary.product_discounts > 0:
            print(f"  Product discounts: -{money(summary.product_discounts)}")
        for coupon in self.cart.applied_coupons:
            print(f"  Coupon {coupon.code}: -{money(coupon.calculate_discount(summary.subtotal, held=True))}")
        if summary.shipping_cost > 0:
            print(f"  Shipping:          {money(summary.shipping_cost)}")
        print(f"  Total:             {money(summary.total)}")
        if summary.total_savings > 0:
            print(f"  You save:          {money(summary.total_savings)}")

        info = self.context.shipping.get_free_shipping_info(summary.subtotal)
        if info.qualified:
            print("  🚚 Free shipping unlocked!")
        else:
            print(f"  🚚 Add {money(info.remaining)} more for free shipping ({info.percentage:.0f}%)")

    def add_product(self) -> None:
        product_id = self.ask("Product ID: ")
        quantity = self.ask_int("Quantity: ")
        if quantity is None:
            return

        result = self.context.carts.add_product_to_cart(self.cart.id, product_id, quantity)
        if result:
            print(f"✓ Added {quantity}x {result.value.product.name} to cart")
        else:
            print(f"✗ {result.message}")

    def change_quantity(self) -> None:
        if self.cart.is_empty:
            print("✗ Your cart is empty")
            return

        product_id = self.ask("Product ID: ")
        quantity = self.ask_int("New quantity (0 removes): ")
        if quantity is None:
            return

        result = self.context.carts.update_product_quantity(self.cart.id, product_id, quantity)
        print("✓ Cart updated" if result else f"✗ {result.message}")

    def remove_item(self) -> None:
        if self.cart.is_empty:
            print("✗ Your cart is empty")
            return

        product_id = self.ask("Product ID: ")
        result = self.context.carts.remove_product_from_cart(self.cart.id, product_id)
        print("✓ Item removed" if result else f"✗ {result.message}")

    def clear_cart(self) -> None:
        if self.ask("Clear the cart? [y/N]: ").lower() != "y":
            print("Aborted.")
            return

        self.context.carts.clear_cart(self.cart.id)
        print("✓ Cart cleared")

    # ==================== Coupons ====================

    def show_coupons(self) -> None:
        coupons = self.context.coupons.get_active_coupons()
        if not coupons:
            print("\n🎫 No coupons available")
            return

        print("\n🎫 Available coupons")
        for coupon in coupons:
            line = f"  {coupon.display_text()}"
            if coupon.description:
                line += f" - {coupon.description}"
            print(line)

    def apply_coupon(self) -> None:
        if self.cart.is_empty:
            print("✗ Add products before applying a coupon")
            return

        code = self.ask("Coupon code: ")
        result = self.context.carts.apply_coupon_to_cart(self.cart.id, code)
        if result:
            discount = result.value.calculate_discount(self.cart.subtotal, held=True)
            print(f"✓ Coupon {result.value.code} applied: -{money(discount)}")
        else:
            print(f"✗ {result.message}")

    # ==================== Shipping ====================

    def calculate_shipping(self) -> None:
        if self.cart.is_empty:
            print("✗ Add products to the cart before calculating shipping")
            return

        postal_code = self.ask("Delivery CEP (00000-000): ")
        availability = self.context.shipping.check_delivery_availability(postal_code)
        if not availability.available:
            print(f"✗ {availability.reason}")
            return

        weight = self.context.shipping.calculate_weight(self.cart.items)
        result = self.context.shipping.get_shipping_options(postal_code, weight, self.cart.subtotal)
        if not result:
            print(f"✗ {result.message}")
            return

        options = result.value
        print(f"\n🚚 Shipping to {options[0].postal_code} ({options[0].region}), {weight:.2f} kg")
        for number, option in enumerate(options, start=1):
            cost = "FREE" if option.cost == 0 else money(option.cost)
            print(
                f"  {number}. {option.name} - {cost} - {option.delivery_days} business days "
                f"(by {option.estimated_delivery.isoformat()})"
            )

        choice = self.ask_int("Choose an option (0 to skip): ")
        if not choice or not 1 <= choice <= len(options):
            return

        selected = options[choice - 1]
        self.context.carts.set_shipping_cost(self.cart.id, selected.cost)
        print(f"✓ {selected.name} shipping applied")

    # ==================== Checkout ====================

    def checkout(self) -> None:
        self.show_cart()
        if self.cart.is_empty:
            return

        if self.ask("\nConfirm purchase? [y/N]: ").lower() != "y":
            print("Aborted.")
            return

        result = self.context.checkout.checkout(self.cart.id)
        if not result:
            print(f"✗ {result.message}")
            for error in result.errors:
                print(f"  - {error}")
            return

        order = result.value
        print("\n" + "=" * 60)
        print(f"✓ Order {order.order_id} confirmed")
        print("=" * 60)
        for item in order.items:
            print(f"  {item.product_name} x{item.quantity} = {money(item.subtotal)}")
        print(f"\n  Total paid: {money(order.summary.total)}")
        if order.summary.total_savings > 0:
            print(f"  You saved:  {money(order.summary.total_savings)}")


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point of the cart-simulator command"""
    parser = argparse.ArgumentParser(prog="cart-simulator", description="Shopping cart simulator")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["menu", "serve"],
        default="menu",
        help="run the terminal menu (default) or serve the HTTP API",
    )
    args = parser.parse_args(argv)

    load_dotenv()

    if args.command == "serve":
        from .main import run

        run()
        return 0

    settings = get_settings()
    setup_logging(settings, console=False)

    try:
        context = build_context(settings)
    except StorageError as e:
        print(f"✗ Could not load data: {e}")
        return 1

    CartSimulatorCLI(context).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
