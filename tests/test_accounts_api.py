"""Integration tests for connected-account endpoints."""

from conftest import make_user
from marketpay.data.models import UserModel
from marketpay.gateway.port import ConnectedAccount

SELLER_BODY = {
    "userId": "seller-1",
    "email": "seller@example.com",
    "sellerName": "Bench Tools",
    "sellerType": "individual",
    "location": "Boston, MA",
    "contactEmail": "shop@example.com",
    "contactPhone": "555-0100",
    "sellerBio": "Vintage hand planes.",
}


class TestCreateConnectedAccount:
    def test_creates_account_and_onboarding_link(self, client, gateway, db):
        make_user(db, "seller-1")

        response = client.post("/create-connected-account", json=SELLER_BODY)

        assert response.status_code == 200
        body = response.json()
        assert body["exists"] is False
        assert body["accountId"].startswith("acct_fake_")
        assert body["url"].startswith("https://connect.fake/setup/")

        link_call = gateway.calls_to("create_account_link")[0]
        assert link_call["refresh_url"] == "https://market.test/seller/onboarding/refresh"
        assert link_call["return_url"] == "https://market.test/seller/onboarding/complete"

        db.expire_all()
        user = db.get(UserModel, "seller-1")
        assert user.stripe_account_id == body["accountId"]
        assert user.stripe_status == "pending"
        assert user.is_seller is True
        assert user.seller_name == "Bench Tools"
        assert user.contact_phone == "555-0100"
        assert user.email == "seller@example.com"

    def test_second_call_reuses_existing_account(self, client, gateway, db):
        make_user(db, "seller-1")

        first = client.post("/create-connected-account", json=SELLER_BODY).json()
        second = client.post("/create-connected-account", json=SELLER_BODY).json()

        assert second["accountId"] == first["accountId"]
        assert second["exists"] is True
        assert len(gateway.calls_to("create_connected_account")) == 1
        assert len(gateway.calls_to("create_account_link")) == 2

    def test_missing_fields(self, client):
        response = client.post("/create-connected-account", json={"userId": "seller-1"})
        assert response.status_code == 400
        assert "email" in response.json()["error"]

    def test_unknown_user(self, client, gateway):
        response = client.post("/create-connected-account", json=SELLER_BODY)
        assert response.status_code == 404
        assert gateway.calls_to("create_connected_account") == []


class TestAccountStatus:
    def test_pulls_status_and_refreshes_local_record(self, client, gateway, db):
        make_user(db, "seller-1", stripe_account_id="acct_1", stripe_status="pending")
        gateway.set_account(
            ConnectedAccount.from_payload(
                {
                    "id": "acct_1",
                    "details_submitted": True,
                    "payouts_enabled": True,
                    "charges_enabled": True,
                    "requirements": {"disabled_reason": None, "eventually_due": ["individual.id_number"]},
                }
            )
        )

        response = client.get("/get-account-status", params={"userId": "seller-1"})

        assert response.status_code == 200
        assert response.json() == {
            "accountId": "acct_1",
            "status": "active",
            "detailsSubmitted": True,
            "payoutsEnabled": True,
            "requirementsDisabledReason": None,
            "requirements": {
                "currentlyDue": [],
                "eventuallyDue": ["individual.id_number"],
                "pastDue": [],
                "pendingVerification": [],
            },
            "chargesEnabled": True,
        }
        db.expire_all()
        user = db.get(UserModel, "seller-1")
        assert user.stripe_status == "active"
        assert user.details_submitted is True
        assert user.payouts_enabled is True
        assert user.last_status_update is not None

    def test_restricted_account(self, client, gateway, db):
        make_user(db, "seller-1", stripe_account_id="acct_1")
        gateway.set_account(
            ConnectedAccount.from_payload(
                {"id": "acct_1", "requirements": {"disabled_reason": "requirements.past_due", "past_due": ["external_account"]}}
            )
        )

        body = client.get("/get-account-status", params={"userId": "seller-1"}).json()

        assert body["status"] == "restricted"
        assert body["requirementsDisabledReason"] == "requirements.past_due"
        assert body["requirements"]["pastDue"] == ["external_account"]

    def test_user_without_account_is_not_a_seller(self, client, db):
        make_user(db, "buyer-1")
        response = client.get("/get-account-status", params={"userId": "buyer-1"})
        assert response.status_code == 404
        assert "not a seller" in response.json()["error"]

    def test_unknown_user(self, client):
        response = client.get("/get-account-status", params={"userId": "ghost"})
        assert response.status_code == 404


class TestLinks:
    def test_refresh_account_link(self, client, gateway, db):
        make_user(db, "seller-1", stripe_account_id="acct_1")
        response = client.get("/refresh-account-link", params={"userId": "seller-1"})
        assert response.status_code == 200
        assert response.json()["url"].startswith("https://connect.fake/setup/acct_1/")

    def test_dashboard_link(self, client, gateway, db):
        make_user(db, "seller-1", stripe_account_id="acct_1")
        response = client.get("/get-dashboard-link", params={"userId": "seller-1"})
        assert response.status_code == 200
        assert response.json() == {"url": "https://connect.fake/express/acct_1"}

    def test_links_require_connected_account(self, client, db):
        make_user(db, "buyer-1")
        assert client.get("/refresh-account-link", params={"userId": "buyer-1"}).status_code == 404
        assert client.get("/get-dashboard-link", params={"userId": "buyer-1"}).status_code == 404
