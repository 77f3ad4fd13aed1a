"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from shoestore.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client without operator identity."""
    return TestClient(app)


@pytest.fixture
def operator_headers() -> dict[str, str]:
    """Identity headers of an operator."""
    return {"X-User-Id": "op-1", "X-User-Role": "admin"}


@pytest.fixture
def operator_client(operator_headers) -> TestClient:
    """Create test client acting as an operator."""
    return TestClient(app, headers=operator_headers)


@pytest.fixture
def catalog_ids(operator_client: TestClient) -> dict[str, int]:
    """Seed Runner X through the admin API.

    Variants: (Black, 9) with 3 units, (Black, 10) with none and
    (White, 9) with 5 units at an override price of 9499.
    """

    def post(path: str, body: dict) -> int:
        response = operator_client.post(path, json=body)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    ids = {
        "black": post("/admin/colors", {"name": "Black", "hex_code": "#000000"}),
        "white": post("/admin/colors", {"name": "White", "hex_code": "#FFFFFF"}),
        "size_9": post("/admin/sizes", {"value": "9"}),
        "size_10": post("/admin/sizes", {"value": "10"}),
        "product": post(
            "/admin/products", {"name": "Runner X", "base_price": 8999, "category_id": 1}
        ),
    }

    def variant(color: str, size: str, sku: str, price: int | None = None) -> int:
        return post(
            "/admin/variants",
            {
                "product_id": ids["product"],
                "color_id": ids[color],
                "size_id": ids[size],
                "sku": sku,
                "price": price,
            },
        )

    ids["black_9"] = variant("black", "size_9", "RX-BLK-9")
    ids["black_10"] = variant("black", "size_10", "RX-BLK-10")
    ids["white_9"] = variant("white", "size_9", "RX-WHT-9", price=9499)

    post("/admin/imports", {"variant_id": ids["black_9"], "quantity": 3, "unit_cost": 4000})
    post("/admin/imports", {"variant_id": ids["white_9"], "quantity": 5, "unit_cost": 4000})
    return ids
