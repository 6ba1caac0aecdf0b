"""Integration tests for POST /create-payment-intent."""

from conftest import make_cart, make_seller, make_user


class TestStandardCheckout:
    def test_cart_without_sellers_creates_standard_intent(self, client, gateway, db):
        make_user(db, "buyer-1")
        cart_id = make_cart(db, "buyer-1", items=[(None, "25.50", 2)])

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["isMarketplace"] is False
        assert body["clientSecret"].startswith("pi_fake_")

        call = gateway.calls_to("create_payment_intent")[0]
        assert call["amount"] == 5100
        assert call["currency"] == "usd"
        assert call["metadata"] == {"cartId": cart_id, "userId": "buyer-1"}

    def test_empty_cart_with_zero_total_is_valid(self, client, gateway, db):
        cart_id = make_cart(db, "buyer-1", items=[], total=0)

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 200
        assert response.json()["isMarketplace"] is False
        assert gateway.calls_to("create_payment_intent")[0]["amount"] == 0


class TestMarketplaceCheckout:
    def test_metadata_counts_distinct_sellers(self, client, gateway, db):
        make_seller(db, "A")
        make_seller(db, "B")
        cart_id = make_cart(db, "buyer-1", items=[("A", 100, 1), ("B", 50, 2), ("A", 10, 1)])

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 200
        assert response.json()["isMarketplace"] is True
        call = gateway.calls_to("create_payment_intent")[0]
        assert call["amount"] == 21000
        assert call["metadata"] == {
            "cartId": cart_id,
            "userId": "buyer-1",
            "isMarketplace": "true",
            "itemCount": "3",
            "sellerCount": "2",
            "platformFeePercent": "5",
        }

    def test_seller_without_connected_account_is_named(self, client, gateway, db):
        make_seller(db, "A")
        make_user(db, "B", is_seller=True)
        cart_id = make_cart(db, "buyer-1", items=[("A", 100, 1), ("B", 50, 1)])

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 400
        assert "B" in response.json()["error"]
        assert gateway.calls_to("create_payment_intent") == []

    def test_unknown_seller_is_rejected(self, client, gateway, db):
        cart_id = make_cart(db, "buyer-1", items=[("ghost", 100, 1)])

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 400
        assert "ghost" in response.json()["error"]


class TestFailures:
    def test_missing_fields(self, client):
        response = client.post("/create-payment-intent", json={"cartId": "c1"})
        assert response.status_code == 400
        assert "userId" in response.json()["error"]

    def test_cart_not_found(self, client):
        response = client.post("/create-payment-intent", json={"cartId": "nope", "userId": "buyer-1"})
        assert response.status_code == 404
        assert response.json() == {"error": "Cart not found"}

    def test_ownership_mismatch(self, client, db):
        cart_id = make_cart(db, "buyer-1", items=[(None, 10, 1)])
        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "intruder"})
        assert response.status_code == 403

    def test_completed_cart_cannot_be_checked_out_again(self, client, gateway, db):
        from marketpay.data.models import CartModel

        cart_id = make_cart(db, "buyer-1", items=[(None, 10, 1)])
        cart = db.get(CartModel, cart_id)
        cart.status = "completed"
        cart.order_id = "order-1"
        db.commit()

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})
        assert response.status_code == 400
        assert gateway.calls_to("create_payment_intent") == []

    def test_gateway_error_message_is_surfaced(self, client, gateway, db):
        cart_id = make_cart(db, "buyer-1", items=[(None, 10, 1)])
        gateway.configure(should_succeed=False, failure_reason="Amount must be at least $0.50 usd")

        response = client.post("/create-payment-intent", json={"cartId": cart_id, "userId": "buyer-1"})

        assert response.status_code == 500
        assert response.json() == {"error": "Amount must be at least $0.50 usd"}
