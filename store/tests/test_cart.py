from decimal import Decimal

from store.cart import CART_SESSION_KEY, Cart


def test_add_merges_lines_ignoring_case(session):
    cart = Cart(session)
    cart.add(1, "Air Max", Decimal("50.00"), quantity=2, size="M", color="Red")
    cart.add(1, "Air Max", Decimal("50.00"), quantity=3, size="m", color="RED")

    assert len(cart) == 1
    assert cart.items[0].quantity == 5


def test_add_keeps_distinct_variants_apart(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00", size="M", color="Red")
    cart.add(1, "Air Max", "50.00", size="L", color="Red")
    cart.add(2, "Dunk Low", "100.00")

    assert len(cart) == 3
    assert cart.total_quantity == 3


def test_missing_axis_matches_empty_string(session):
    cart = Cart(session)
    cart.add(7, "Dunk Low", "100.00", size=None, color=None)
    cart.add(7, "Dunk Low", "100.00", size="", color="")

    assert len(cart) == 1
    assert cart.items[0].quantity == 2


def test_remove_drops_every_matching_line(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00", size="M", color="Red")
    cart.add(1, "Air Max", "50.00", size="L", color="Red")

    cart.remove(1, "m", "red")

    assert [(i.size, i.color) for i in cart] == [("L", "Red")]


def test_set_quantity_overwrites_or_removes(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00", quantity=4, size="M", color="Red")
    cart.add(2, "Dunk Low", "100.00")

    cart.set_quantity(1, "M", "Red", 1)
    assert cart.find(1, "M", "Red").quantity == 1

    cart.set_quantity(2, "", "", 0)
    assert cart.find(2) is None
    assert len(cart) == 1


def test_set_quantity_for_unknown_line_is_a_no_op(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00")
    cart.set_quantity(99, "", "", 3)
    assert len(cart) == 1


def test_clear_empties_cart_and_session(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00")
    cart.clear()

    assert not cart
    assert session[CART_SESSION_KEY] == []


def test_every_mutation_writes_the_whole_list(session):
    cart = Cart(session)
    cart.add(1, "Air Max", Decimal("49.99"), image_url="/img/a.png", quantity=2, size="42", color="Black")

    assert session.modified is True
    assert session[CART_SESSION_KEY] == [{
        "product_id": 1,
        "product_name": "Air Max",
        "price": "49.99",
        "quantity": 2,
        "image_url": "/img/a.png",
        "size": "42",
        "color": "Black",
    }]

    reloaded = Cart(session)
    assert reloaded.items[0].price == Decimal("49.99")
    assert reloaded.total_price == Decimal("99.98")


def test_unreadable_session_payload_reads_as_empty(session):
    session[CART_SESSION_KEY] = [{"product_name": "no id"}]
    assert len(Cart(session)) == 0


def test_totals(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00", quantity=2)
    cart.add(2, "Dunk Low", "19.99", quantity=3)

    assert cart.total_quantity == 5
    assert cart.total_price == Decimal("159.97")


def test_numeric_sizes_are_stored_as_text(session):
    cart = Cart(session)
    cart.add(1, "Air Max", "50.00", size=42, color="Red")
    cart.add(1, "Air Max", "50.00", size="42", color="red")

    assert len(cart) == 1
    assert cart.items[0].size == "42"
    assert cart.items[0].quantity == 2
    assert session[CART_SESSION_KEY][0]["size"] == "42"

    cart.set_quantity(1, 42, "Red", 5)
    assert cart.items[0].quantity == 5
    cart.remove(1, 42, "RED")
    assert not cart
