import logging
from typing import List, Optional

import httpx

from app.client.cart import Cart, CartLine
from app.client.session import SessionContext

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, detail):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class MarketplaceClient:
    """Thin HTTP client for the marketplace API.

    Accepts any ``httpx.Client`` (a FastAPI ``TestClient`` included), so the
    same code drives a live server or the app in-process.
    """

    def __init__(self, http: httpx.Client = None, base_url: str = "http://localhost:8000"):
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)

    def _request(self, method: str, url: str, **kwargs):
        response = self.http.request(method, url, **kwargs)
        if response.is_error:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ApiError(response.status_code, detail)
        return response.json()

    def register(self, email: str, password: str, full_name: str, user_type: str) -> dict:
        return self._request("POST", "/auth/register", json={
            "email": email, "password": password, "fullName": full_name, "userType": user_type,
        })

    def login(self, session: SessionContext, email: str, password: str) -> dict:
        payload = self._request("POST", "/auth/login", json={"email": email, "password": password})
        session.start(payload["user"], payload["access_token"])
        return payload["user"]

    def list_crops(self, **params) -> dict:
        return self._request("GET", "/crops", params={k: v for k, v in params.items() if v is not None})

    def list_orders(self, farmer_id: Optional[int] = None) -> List[dict]:
        params = {"farmerId": farmer_id} if farmer_id is not None else {}
        return self._request("GET", "/orders", params=params)

    def approve_order(self, session: SessionContext, order_id: int) -> dict:
        return self._request("PUT", f"/orders/{order_id}/approve", headers=session.auth_headers())

    def get_messages(self, session: SessionContext) -> List[dict]:
        return self._request("GET", "/messages", params={"userId": session.require_user()["id"]})

    def send_message(self, session: SessionContext, receiver_id: int, content: str) -> dict:
        return self._request("POST", "/messages", json={
            "senderId": session.require_user()["id"], "receiverId": receiver_id, "content": content,
        })

    def add_to_cart(self, cart: Cart, crop: dict, quantity: int = 1):
        cart.add(CartLine(
            crop_id=crop["id"],
            name=crop["name"],
            price_per_unit=crop["price_per_unit"],
            quantity=quantity,
            farmer_id=crop["farmer_id"],
            farmer_name=crop.get("farmer_name"),
        ))

    def checkout(self, session: SessionContext, cart: Cart, farmer_id: int) -> List[dict]:
        """Place the orders for one farmer's lines; clear them only on success."""
        buyer = session.require_user()
        lines = cart.by_farmer().get(farmer_id, [])
        if not lines:
            raise ValueError(f"No cart lines for farmer {farmer_id}")

        payload = self._request("POST", "/orders", json={
            "buyer_id": buyer["id"],
            "buyer_contact": session.contact,
            "items": [{"crop_id": line.crop_id, "quantity": line.quantity} for line in lines],
        })
        cart.clear_for_farmer(farmer_id)
        logger.info("Checked out %d lines for farmer %s", len(lines), farmer_id)
        return payload["created"]
