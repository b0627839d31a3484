"""Tests for the coupon and coupon rule API endpoints."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.main import app
from app.models.coupon_rule import CouponRule
from app.schemas.coupon import CouponCreate, CouponUpdate
from app.schemas.coupon_validation import ValidateCouponRequest


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def coupon(client):
    """Create a 10% coupon through the API."""
    response = client.post(
        "/v1/coupons/",
        json={"code": "save10", "discount_type": "percentage", "discount_value": "10"},
    )
    assert response.status_code == 201
    return response.json()


def cart_item(product_id, price, quantity=1, category_id=None, new_arrival=False):
    return {
        "product_id": product_id,
        "quantity": quantity,
        "product": {"price": price, "category_id": category_id, "new_arrival": new_arrival},
    }


SHOES_CART = [
    cart_item("shoe1", "2000", category_id="shoes"),
    cart_item("shoe2", "1500", category_id="shoes"),
    cart_item("sock1", "300", category_id="socks"),
    cart_item("sock2", "200", category_id="socks"),
]

FREE_SOCK_RULE = {
    "rule_name": "Free socks",
    "source_type": "category",
    "source_category_id": "shoes",
    "source_min_quantity": 2,
    "benefit_type": "free_items",
    "target_category_id": "socks",
    "free_quantity": 1,
    "free_item_selection": "cheapest",
}


class TestCouponSchemas:
    def test_code_normalized(self):
        """Test codes are stripped and uppercased."""
        assert CouponCreate(code=" summer ").code == "SUMMER"

    def test_window_order(self):
        """Test valid_until may not precede valid_from."""
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            CouponCreate(code="X", valid_from=now, valid_until=now - timedelta(days=1))

    def test_max_discount_must_be_positive(self):
        """Test a zero max discount is rejected."""
        with pytest.raises(ValidationError):
            CouponCreate(code="X", max_discount_amount=Decimal("0"))

    def test_blank_code_rejected(self):
        """Test a code of only spaces is rejected after stripping."""
        with pytest.raises(ValidationError):
            CouponCreate(code="   ")
        with pytest.raises(ValidationError):
            CouponUpdate(code="  ")
        with pytest.raises(ValidationError):
            ValidateCouponRequest(code=" ", subtotal=Decimal("100"))

    def test_bounds_converted_to_utc(self):
        """Test offset-aware bounds are stored as the same instant in UTC."""
        ist = timezone(timedelta(hours=5, minutes=30))
        data = CouponCreate(code="X", valid_until=datetime(2026, 3, 1, 9, 0, tzinfo=ist))
        assert data.valid_until == datetime(2026, 3, 1, 3, 30, tzinfo=UTC)
        assert data.valid_until.utcoffset() == timedelta(0)
        naive = CouponUpdate(valid_from=datetime(2026, 3, 1, 9, 0))
        assert naive.valid_from == datetime(2026, 3, 1, 9, 0, tzinfo=UTC)

    def test_update_rejects_null_required_fields(self):
        """Test explicit nulls are rejected for columns that cannot be empty."""
        for name in ("is_active", "discount_value", "max_applications_per_order", "code"):
            with pytest.raises(ValidationError):
                CouponUpdate(**{name: None})
        assert CouponUpdate(max_discount_amount=None, usage_limit=None).model_fields_set == {
            "max_discount_amount",
            "usage_limit",
        }


class TestCouponCrud:
    def test_root(self, client):
        """Test the root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_create(self, coupon):
        """Test creating a coupon stores its code uppercase."""
        assert coupon["code"] == "SAVE10"
        assert coupon["used_count"] == 0
        assert coupon["is_active"] is True
        assert coupon["max_applications_per_order"] == 1
        assert Decimal(coupon["discount_value"]) == Decimal("10")

    def test_create_duplicate(self, client, coupon):
        """Test a duplicate code is rejected regardless of case."""
        response = client.post("/v1/coupons/", json={"code": "Save10"})
        assert response.status_code == 409

    def test_create_invalid(self, client):
        """Test invalid payloads are rejected."""
        response = client.post("/v1/coupons/", json={"code": "X", "discount_value": "-1"})
        assert response.status_code == 422

    def test_list(self, client, coupon):
        """Test listing coupons with a total count header."""
        client.post("/v1/coupons/", json={"code": "OTHER"})
        response = client.get("/v1/coupons/")
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert {c["code"] for c in response.json()} == {"SAVE10", "OTHER"}

    def test_list_active(self, client, coupon):
        """Test only usable coupons are listed as active."""
        client.post("/v1/coupons/", json={"code": "OFF", "is_active": False})
        client.post(
            "/v1/coupons/",
            json={
                "code": "OLD",
                "valid_until": (datetime.now(UTC) - timedelta(days=1)).isoformat(),
            },
        )
        client.post(
            "/v1/coupons/",
            json={
                "code": "SOON",
                "valid_from": (datetime.now(UTC) + timedelta(days=1)).isoformat(),
            },
        )
        response = client.get("/v1/coupons/active")
        assert response.status_code == 200
        assert [c["code"] for c in response.json()] == ["SAVE10"]

    def test_get_with_rules(self, client, coupon):
        """Test a coupon is returned with its rules, highest priority first."""
        client.post(
            f"/v1/coupons/{coupon['id']}/rules",
            json={"rule_name": "Low", "rule_priority": 1, "benefit_type": "bundle_price"},
        )
        client.post(
            f"/v1/coupons/{coupon['id']}/rules",
            json={"rule_name": "High", "rule_priority": 9, "benefit_type": "bundle_price"},
        )
        response = client.get(f"/v1/coupons/{coupon['id']}")
        assert response.status_code == 200
        assert [r["rule_name"] for r in response.json()["rules"]] == ["High", "Low"]

    def test_get_not_found(self, client):
        """Test an unknown coupon returns 404."""
        assert client.get(f"/v1/coupons/{uuid4()}").status_code == 404

    def test_update(self, client, coupon):
        """Test updating a coupon."""
        response = client.put(
            f"/v1/coupons/{coupon['id']}",
            json={"code": "save20", "discount_value": "20", "usage_limit": 5},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["code"] == "SAVE20"
        assert Decimal(data["discount_value"]) == Decimal("20")
        assert data["usage_limit"] == 5

    def test_update_code_conflict(self, client, coupon):
        """Test renaming onto an existing code is rejected."""
        client.post("/v1/coupons/", json={"code": "TAKEN"})
        response = client.put(f"/v1/coupons/{coupon['id']}", json={"code": "taken"})
        assert response.status_code == 409

    def test_update_not_found(self, client):
        """Test updating an unknown coupon returns 404."""
        assert client.put(f"/v1/coupons/{uuid4()}", json={"description": "x"}).status_code == 404

    def test_update_null_required_field(self, client, coupon):
        """Test nulling a required column is a validation error, not a crash."""
        response = client.put(f"/v1/coupons/{coupon['id']}", json={"is_active": None})
        assert response.status_code == 422
        assert client.get(f"/v1/coupons/{coupon['id']}").json()["is_active"] is True

    def test_update_window_checked_against_stored_bound(self, client):
        """Test a new end date may not precede the stored start date."""
        created = client.post(
            "/v1/coupons/",
            json={"code": "SPRING", "valid_from": "2026-03-01T00:00:00Z"},
        ).json()
        response = client.put(
            f"/v1/coupons/{created['id']}", json={"valid_until": "2026-02-01T00:00:00Z"}
        )
        assert response.status_code == 422
        ok = client.put(
            f"/v1/coupons/{created['id']}", json={"valid_until": "2026-04-01T00:00:00+05:30"}
        )
        assert ok.status_code == 200

    def test_delete_removes_rules(self, client, coupon, db_session):
        """Test deleting a coupon also deletes its rules."""
        client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE)
        response = client.delete(f"/v1/coupons/{coupon['id']}")
        assert response.status_code == 204
        assert client.get(f"/v1/coupons/{coupon['id']}").status_code == 404
        assert db_session.query(CouponRule).count() == 0

    def test_delete_not_found(self, client):
        """Test deleting an unknown coupon returns 404."""
        assert client.delete(f"/v1/coupons/{uuid4()}").status_code == 404


class TestCouponRuleCrud:
    def test_create_and_list(self, client, coupon):
        """Test attaching a rule and listing it."""
        response = client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE)
        assert response.status_code == 201
        rule = response.json()
        assert rule["coupon_id"] == coupon["id"]
        assert rule["source_type"] == "category"
        assert rule["benefit_type"] == "free_items"
        assert rule["free_item_selection"] == "cheapest"
        assert rule["is_active"] is True

        listed = client.get(f"/v1/coupons/{coupon['id']}/rules").json()
        assert [r["id"] for r in listed] == [rule["id"]]

    def test_create_for_unknown_coupon(self, client):
        """Test a rule cannot be attached to an unknown coupon."""
        response = client.post(f"/v1/coupons/{uuid4()}/rules", json=FREE_SOCK_RULE)
        assert response.status_code == 404

    def test_create_invalid_benefit_type(self, client, coupon):
        """Test an unknown benefit type is rejected."""
        response = client.post(
            f"/v1/coupons/{coupon['id']}/rules",
            json={"rule_name": "Bad", "benefit_type": "cashback"},
        )
        assert response.status_code == 422

    def test_update(self, client, coupon):
        """Test updating a rule by ID."""
        rule = client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE).json()
        response = client.put(
            f"/v1/coupon_rules/{rule['id']}",
            json={"free_item_selection": "most_expensive", "is_active": False},
        )
        assert response.status_code == 200
        assert response.json()["free_item_selection"] == "most_expensive"
        assert response.json()["is_active"] is False

    def test_update_not_found(self, client):
        """Test updating an unknown rule returns 404."""
        response = client.put(f"/v1/coupon_rules/{uuid4()}", json={"rule_name": "x"})
        assert response.status_code == 404

    def test_update_null_required_field(self, client, coupon):
        """Test nulling a required rule column is a validation error."""
        rule = client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE).json()
        response = client.put(f"/v1/coupon_rules/{rule['id']}", json={"benefit_type": None})
        assert response.status_code == 422

    def test_delete(self, client, coupon):
        """Test deleting a rule by ID."""
        rule = client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE).json()
        assert client.delete(f"/v1/coupon_rules/{rule['id']}").status_code == 204
        assert client.get(f"/v1/coupons/{coupon['id']}/rules").json() == []
        assert client.delete(f"/v1/coupon_rules/{rule['id']}").status_code == 404

    def test_lint(self, client):
        """Test linting a rule definition without saving it."""
        response = client.post(
            "/v1/coupon_rules/lint",
            json={"rule_name": "Bundle", "benefit_type": "bundle_price"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "warnings": ["bundle_fixed_price is not set; matching items become free"]
        }


class TestValidateEndpoint:
    def test_blank_code(self, client, coupon):
        """Test a code of only spaces is rejected before lookup."""
        response = client.post("/v1/coupons/validate", json={"code": "   ", "subtotal": "100"})
        assert response.status_code == 422

    def test_invalid_code(self, client):
        """Test an unknown code is reported in the body, not as an error status."""
        response = client.post("/v1/coupons/validate", json={"code": "NOPE", "subtotal": "100"})
        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "message": "Invalid coupon code",
            "discount": None,
            "coupon": None,
            "applied_rules": [],
            "total_savings": None,
            "breakdown": None,
        }

    def test_simple_coupon(self, client, coupon):
        """Test validating a simple coupon."""
        response = client.post(
            "/v1/coupons/validate", json={"code": "save10", "subtotal": "1000"}
        )
        data = response.json()
        assert data["valid"] is True
        assert Decimal(data["discount"]) == Decimal("100")
        assert data["breakdown"]["explanation"] == "10% discount applied"
        assert data["coupon"]["rules"] == []

    def test_rule_coupon(self, client, coupon):
        """Test validating a cart against a buy-X-get-Y rule."""
        client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE)
        response = client.post(
            "/v1/coupons/validate",
            json={"code": "SAVE10", "subtotal": "4000", "cart_items": SHOES_CART},
        )
        data = response.json()
        assert data["valid"] is True
        assert Decimal(data["total_savings"]) == Decimal("200")
        applied = data["applied_rules"][0]
        assert applied["rule_name"] == "Free socks"
        assert applied["target_items"] == ["sock2"]
        assert applied["provisional_selection"] is False
        assert data["breakdown"]["applied_rule_count"] == 1

    def test_rule_not_met(self, client, coupon):
        """Test the unmet requirement is explained."""
        client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE)
        response = client.post(
            "/v1/coupons/validate",
            json={"code": "SAVE10", "subtotal": "2300", "cart_items": SHOES_CART[::3]},
        )
        data = response.json()
        assert data["valid"] is False
        assert data["message"] == "Need 2 items from specified category, but only 1 in cart"

    def test_invalid_cart_item(self, client, coupon):
        """Test a cart line with zero quantity is rejected."""
        response = client.post(
            "/v1/coupons/validate",
            json={
                "code": "SAVE10",
                "subtotal": "100",
                "cart_items": [cart_item("a", "100", quantity=0)],
            },
        )
        assert response.status_code == 422


class TestRedeemEndpoint:
    def test_redeem(self, client, coupon):
        """Test redeeming a coupon counts the use and returns the log entries."""
        client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE)
        response = client.post(
            "/v1/coupons/redeem",
            json={
                "code": "SAVE10",
                "subtotal": "4000",
                "cart_items": SHOES_CART,
                "order_id": "order-1",
                "user_id": "user-1",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["result"]["valid"] is True
        assert len(data["applications"]) == 1
        application = data["applications"][0]
        assert application["order_id"] == "order-1"
        assert application["source_items"] == ["shoe1", "shoe2"]
        assert application["target_items"] == ["sock2"]
        assert Decimal(application["discount_amount"]) == Decimal("200")
        assert client.get(f"/v1/coupons/{coupon['id']}").json()["used_count"] == 1

    def test_redeem_invalid(self, client):
        """Test redeeming an unknown coupon is a conflict."""
        response = client.post("/v1/coupons/redeem", json={"code": "NOPE", "subtotal": "10"})
        assert response.status_code == 409
        assert response.json()["detail"] == "Invalid coupon code"

    def test_redeem_exhausted(self, client, coupon):
        """Test a coupon cannot be redeemed past its usage limit."""
        client.put(f"/v1/coupons/{coupon['id']}", json={"usage_limit": 1})
        first = client.post("/v1/coupons/redeem", json={"code": "SAVE10", "subtotal": "100"})
        second = client.post("/v1/coupons/redeem", json={"code": "SAVE10", "subtotal": "100"})
        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["detail"] == "This coupon has reached its usage limit"


class TestAnalyticsEndpoint:
    def test_analytics(self, client, coupon):
        """Test analytics summarize redemptions from the application log."""
        client.put(f"/v1/coupons/{coupon['id']}", json={"usage_limit": 10})
        for order_id in ("order-1", "order-2"):
            client.post(
                "/v1/coupons/redeem",
                json={"code": "SAVE10", "subtotal": "1000", "order_id": order_id},
            )

        response = client.get(f"/v1/coupons/{coupon['id']}/analytics")
        assert response.status_code == 200
        data = response.json()
        assert data["used_count"] == 2
        assert data["usage_limit"] == 10
        assert data["remaining_uses"] == 8
        assert data["orders_applied"] == 2
        assert Decimal(data["total_discount"]) == Decimal("200")
        assert data["discount_by_rule"] == {}

    def test_analytics_by_rule(self, client, coupon):
        """Test rule discounts are broken down by rule."""
        rule = client.post(f"/v1/coupons/{coupon['id']}/rules", json=FREE_SOCK_RULE).json()
        client.post(
            "/v1/coupons/redeem",
            json={"code": "SAVE10", "subtotal": "4000", "cart_items": SHOES_CART},
        )
        data = client.get(f"/v1/coupons/{coupon['id']}/analytics").json()
        assert data["remaining_uses"] is None
        assert Decimal(data["discount_by_rule"][rule["id"]]) == Decimal("200")

    def test_analytics_not_found(self, client):
        """Test analytics of an unknown coupon return 404."""
        assert client.get(f"/v1/coupons/{uuid4()}/analytics").status_code == 404
