"""Tests for the terminal menu"""

import logging

import pytest

from cart_simulator.cli import CartSimulatorCLI
from cart_simulator.core.logs import setup_logging


def scripted(answers):
    """Input function replaying answers, then choosing exit"""
    remaining = iter(answers)

    def fake_input(prompt):
        return next(remaining, "0")

    return fake_input


@pytest.fixture
def run_menu(stocked_context):
    def run(*answers):
        cli = CartSimulatorCLI(stocked_context, input_func=scripted(answers))
        cli.run()
        return cli

    return run


def test_exit(run_menu, capsys):
    run_menu("0")
    assert "Goodbye" in capsys.readouterr().out


def test_menu_uses_default_user_cart(run_menu, stocked_context):
    cli = run_menu()
    user_id = stocked_context.settings.default_user_id

    assert cli.cart is stocked_context.carts.get_cart_by_user(user_id)
    assert run_menu().cart is cli.cart


def test_catalog_and_search(run_menu, capsys):
    run_menu("1", "2", "chair")
    out = capsys.readouterr().out

    assert "[p-100] Desk Chair - R$ 90.00 (was R$ 100.00, -10%)" in out
    assert "1 product(s) found" in out


def test_add_and_view_cart(run_menu, capsys):
    cli = run_menu("4", "p-100", "2", "3")
    out = capsys.readouterr().out

    assert "✓ Added 2x Desk Chair to cart" in out
    assert "Desk Chair x2 @ R$ 90.00 = R$ 180.00" in out
    assert "Free shipping unlocked" in out
    assert cli.cart.total_items == 2


def test_invalid_input_is_reported(run_menu, capsys):
    run_menu("42", "4", "p-100", "lots", "4", "missing", "1")
    out = capsys.readouterr().out

    assert "✗ Invalid option" in out
    assert "✗ 'lots' is not a number" in out
    assert "✗ Product not found" in out


def test_change_quantity_and_remove(run_menu, capsys):
    cli = run_menu("4", "p-050", "2", "5", "p-050", "4", "6", "p-050")
    out = capsys.readouterr().out

    assert "✓ Cart updated" in out
    assert "✓ Item removed" in out
    assert cli.cart.is_empty


def test_coupons(run_menu, stocked_context, capsys):
    cli = run_menu("7", "4", "p-100", "1", "8", "ten")
    out = capsys.readouterr().out

    assert "TEN - 10% off (min. R$ 50.00)" in out
    assert "✓ Coupon TEN applied: -R$ 9.00" in out
    assert cli.cart.has_coupon("TEN")
    assert stocked_context.coupons.get_coupon("TEN").usage_count == 1


def test_shipping_selection(run_menu, capsys):
    cli = run_menu("4", "p-050", "1", "9", "22041-001", "3")
    out = capsys.readouterr().out

    assert "Shipping to 22041-001 (Rio de Janeiro)" in out
    assert "✓ Express shipping applied" in out
    assert cli.cart.shipping_cost == pytest.approx(34.80)


def test_checkout(run_menu, stocked_context, capsys):
    cli = run_menu("4", "p-100", "3", "10", "y")
    out = capsys.readouterr().out

    assert "confirmed" in out
    assert cli.cart.is_empty
    assert stocked_context.products.get_product("p-100").stock == 7


def test_checkout_can_be_cancelled(run_menu, stocked_context, capsys):
    cli = run_menu("4", "p-100", "1", "10", "n")

    assert "Aborted." in capsys.readouterr().out
    assert not cli.cart.is_empty
    assert stocked_context.products.get_product("p-100").stock == 10


def test_clear_cart(run_menu, capsys):
    cli = run_menu("4", "p-100", "1", "11", "y")

    assert "✓ Cart cleared" in capsys.readouterr().out
    assert cli.cart.is_empty


def test_end_of_input_exits(stocked_context, capsys):
    def closed_input(prompt):
        raise EOFError

    CartSimulatorCLI(stocked_context, input_func=closed_input).run()

    assert "Goodbye" in capsys.readouterr().out


def test_menu_logging_goes_to_file(settings, capsys):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(settings, console=False)
        logging.getLogger("cart_simulator.menu").info("cart updated")
        for handler in root.handlers:
            handler.flush()

        assert not any(type(h) is logging.StreamHandler for h in root.handlers)
        log_file = settings.data_path / "logs" / "app.log"
        assert "cart updated" in log_file.read_text(encoding="utf-8")
        assert "cart updated" not in capsys.readouterr().err
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
