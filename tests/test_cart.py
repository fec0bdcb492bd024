import pytest

from app.client.cart import Cart, CartLine, CART_STORAGE_KEY
from app.client.storage import LocalStore


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "local-storage.json")


@pytest.fixture
def cart(store):
    return Cart(store)


def line(crop_id=1, quantity=1, farmer_id=10, price=50.0, name=None):
    return CartLine(
        crop_id=crop_id, name=name or f"Crop {crop_id}", price_per_unit=price,
        quantity=quantity, farmer_id=farmer_id,
    )


def test_adding_same_crop_sums_quantities(cart):
    cart.add(line(quantity=2))
    cart.add(line(quantity=3))
    assert len(cart) == 1
    assert cart.get(1).quantity == 5


def test_update_quantity_floors(cart):
    cart.add(line())
    cart.update_quantity(1, 4.9)
    assert cart.get(1).quantity == 4


@pytest.mark.parametrize("quantity", [0, -5, 0.4])
def test_update_quantity_to_zero_or_less_removes_line(cart, quantity):
    cart.add(line(crop_id=1))
    cart.add(line(crop_id=2))
    cart.update_quantity(1, quantity)
    assert cart.get(1) is None
    assert cart.get(2) is not None


def test_remove(cart):
    cart.add(line(crop_id=1))
    cart.add(line(crop_id=2))
    cart.remove(1)
    assert [l.crop_id for l in cart.lines] == [2]


def test_clear_for_farmer(cart):
    cart.add(line(crop_id=1, farmer_id=10))
    cart.add(line(crop_id=2, farmer_id=20))
    cart.add(line(crop_id=3, farmer_id=10))
    cart.clear_for_farmer(10)
    assert [l.crop_id for l in cart.lines] == [2]


def test_clear_all(cart, store):
    cart.add(line())
    cart.clear_all()
    assert len(cart) == 0
    assert store.get(CART_STORAGE_KEY) == []


def test_grouping_is_derived_from_lines(cart):
    cart.add(line(crop_id=1, farmer_id=10, quantity=2, price=50))
    cart.add(line(crop_id=2, farmer_id=20, quantity=1, price=30))
    cart.add(line(crop_id=3, farmer_id=10, quantity=4, price=12.5))

    groups = cart.by_farmer()
    assert list(groups) == [10, 20]
    assert [l.crop_id for l in groups[10]] == [1, 3]
    assert cart.farmer_total(10) == 150
    assert cart.farmer_total(20) == 30
    assert cart.farmer_total(99) == 0
    assert cart.total == 180

    cart.update_quantity(3, 0)
    assert [l.crop_id for l in cart.by_farmer()[10]] == [1]


def test_cart_survives_reload(store):
    cart = Cart(store)
    cart.add(line(crop_id=7, quantity=3, farmer_id=42))

    reloaded = Cart(store)
    assert reloaded.get(7).quantity == 3
    assert reloaded.get(7).farmer_id == 42


def test_corrupt_store_starts_empty(tmp_path):
    path = tmp_path / "local-storage.json"
    path.write_text("{not json")
    assert len(Cart(LocalStore(path))) == 0


def test_cart_line_needs_positive_quantity():
    with pytest.raises(ValueError):
        line(quantity=0)
