import pytest
from bson import ObjectId
from pydantic import ValidationError

from main import coerce_product_id
from schemas import Product, ProductUpdate, User
from tests.conftest import CHAIR


def test_product_defaults_post_date():
    assert Product(**CHAIR).datePoster


def test_product_document_converts_user_id():
    owner = ObjectId()
    doc = Product(**CHAIR, userId=str(owner)).to_document()
    assert doc["userId"] == owner


def test_product_document_omits_missing_user():
    assert "userId" not in Product(**CHAIR).to_document()


def test_product_rejects_blank_title():
    with pytest.raises(ValidationError):
        Product(**{**CHAIR, "title": ""})


def test_product_rejects_negative_price():
    with pytest.raises(ValidationError):
        Product(**{**CHAIR, "price": -1})


def test_update_only_carries_supplied_fields():
    assert ProductUpdate(price=25).to_update() == {"price": 25}
    assert ProductUpdate().to_update() == {}


def test_user_role_is_restricted():
    with pytest.raises(ValidationError):
        User(email="x@shop.com", password="p", role="buyer")


@pytest.mark.parametrize(
    "raw, expected",
    [("1", 1), (" 12 ", 12), ("3.0", 3), ("abc", None), ("1.5", None), ("nan", None), ("inf", None),
     ("9223372036854775807", 2 ** 63 - 1), ("9223372036854775808", None),
     ("-9223372036854775808", -2 ** 63), ("99999999999999999999", None), ("1e30", None)],
)
def test_coerce_product_id(raw, expected):
    assert coerce_product_id(raw) == expected


@pytest.mark.parametrize("big", [2 ** 63, -2 ** 63 - 1])
def test_product_id_must_fit_int64(big):
    with pytest.raises(ValidationError):
        Product(**{**CHAIR, "id": big})
    with pytest.raises(ValidationError):
        ProductUpdate(id=big)


def test_product_id_accepts_int64_bounds():
    assert Product(**{**CHAIR, "id": 2 ** 63 - 1}).id == 2 ** 63 - 1
    assert ProductUpdate(id=-2 ** 63).id == -2 ** 63
