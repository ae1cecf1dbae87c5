"""API tests for issuances, returns, purchase orders, disposal and fabrication."""

import pytest
from httpx import AsyncClient


@pytest.fixture
async def seeded(api_client: AsyncClient) -> dict:
    client = (await api_client.post("/api/clients", json={"name": "Acme"})).json()
    supplier = (await api_client.post("/api/suppliers", json={"name": "Northwind"})).json()
    product = (
        await api_client.post(
            "/api/products", json={"name": "Pipe", "sku": "PIP-1", "initial_stock": 10}
        )
    ).json()
    return {"client": client, "supplier": supplier, "product": product}


async def _stock(api_client: AsyncClient, product_id: str) -> int:
    return (await api_client.get(f"/api/products/{product_id}")).json()["stock"]


async def _issue(api_client: AsyncClient, seeded: dict, quantity: int):
    return await api_client.post(
        "/api/issuances",
        json={
            "client_id": seeded["client"]["id"],
            "issued_by": "alice",
            "items": [{"product_id": seeded["product"]["id"], "quantity": quantity}],
        },
    )


class TestIssuancesAPI:
    async def test_issue_and_delete(self, api_client: AsyncClient, seeded):
        response = await _issue(api_client, seeded, 4)

        assert response.status_code == 201
        issuance = response.json()
        assert issuance["issuance_number"] == "IS-000001"
        assert await _stock(api_client, seeded["product"]["id"]) == 6

        deleted = await api_client.delete(f"/api/issuances/{issuance['id']}")

        assert deleted.status_code == 204
        assert await _stock(api_client, seeded["product"]["id"]) == 10

    async def test_insufficient_stock(self, api_client: AsyncClient, seeded):
        response = await _issue(api_client, seeded, 11)

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "INSUFFICIENT_STOCK"
        assert body["details"] == {
            "product_id": seeded["product"]["id"],
            "requested": 11,
            "available": 10,
            "line": 0,
        }

    async def test_zero_quantity_rejected_by_schema(self, api_client: AsyncClient, seeded):
        response = await _issue(api_client, seeded, 0)

        assert response.status_code == 422


class TestReturnsAPI:
    async def test_full_return_cycle(self, api_client: AsyncClient, seeded):
        issuance = (await _issue(api_client, seeded, 5)).json()
        product_id = seeded["product"]["id"]

        created = await api_client.post(
            "/api/returns",
            json={
                "issuance_id": issuance["id"],
                "reason": "damaged",
                "items": [{"product_id": product_id, "quantity": 5}],
            },
        )
        assert created.status_code == 201
        ret = created.json()

        received = await api_client.post(f"/api/returns/{ret['id']}/receive", json={"processed_by": "bob"})
        assert received.json()["status"] == "Received"

        inspected = await api_client.post(
            f"/api/returns/{ret['id']}/inspection",
            json={
                "inspector": "carol",
                "lines": [{"product_id": product_id, "restock": 3, "disposal": 1}],
            },
        )

        assert inspected.status_code == 200
        result = inspected.json()
        assert result["total_unaccounted"] == 1
        assert result["return_record"]["status"] == "Completed"
        assert await _stock(api_client, product_id) == 8

        items = (await api_client.get("/api/disposals/items")).json()
        disposed = await api_client.post(
            "/api/disposals",
            json={
                "selection": [{"source_type": "product", "source_id": items["products"][0]["id"]}],
                "reason": "crushed",
                "disposed_by": "erin",
            },
        )
        assert disposed.status_code == 200
        assert await _stock(api_client, product_id) == 8

        blocked = await api_client.delete(f"/api/returns/{ret['id']}")
        assert blocked.status_code == 409

    async def test_over_split_is_422(self, api_client: AsyncClient, seeded):
        issuance = (await _issue(api_client, seeded, 2)).json()
        product_id = seeded["product"]["id"]
        ret = (
            await api_client.post(
                "/api/returns",
                json={"issuance_id": issuance["id"], "items": [{"product_id": product_id, "quantity": 2}]},
            )
        ).json()
        await api_client.post(f"/api/returns/{ret['id']}/receive")

        response = await api_client.post(
            f"/api/returns/{ret['id']}/inspection",
            json={"inspector": "carol", "lines": [{"product_id": product_id, "restock": 2, "disposal": 1}]},
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_QUANTITY"

    async def test_cancel_then_receive_is_invalid_transition(self, api_client: AsyncClient, seeded):
        issuance = (await _issue(api_client, seeded, 2)).json()
        ret = (
            await api_client.post(
                "/api/returns",
                json={
                    "issuance_id": issuance["id"],
                    "items": [{"product_id": seeded["product"]["id"], "quantity": 1}],
                },
            )
        ).json()

        await api_client.post(f"/api/returns/{ret['id']}/cancel")
        response = await api_client.post(f"/api/returns/{ret['id']}/receive")

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_TRANSITION"


class TestPurchaseOrdersAPI:
    async def test_receive_partial_delivery(self, api_client: AsyncClient, seeded):
        product_id = seeded["product"]["id"]
        order = (
            await api_client.post(
                "/api/purchase-orders",
                json={
                    "supplier_id": seeded["supplier"]["id"],
                    "items": [{"product_id": product_id, "quantity": 20, "unit_cost": 1.5}],
                },
            )
        ).json()
        assert order["po_number"] == "PO-000001"
        assert order["total_cost"] == 30.0

        await api_client.post(f"/api/purchase-orders/{order['id']}/ship")
        await api_client.post(f"/api/purchase-orders/{order['id']}/deliver")
        response = await api_client.post(
            f"/api/purchase-orders/{order['id']}/inspection",
            json={"lines": [{"product_id": product_id, "received": 15}]},
        )

        assert response.status_code == 200
        assert response.json()["total_short"] == 5
        assert await _stock(api_client, product_id) == 25

        paid = await api_client.post(f"/api/purchase-orders/{order['id']}/pay", json={"amount": 30.0})
        assert paid.json()["payment_status"] == "Paid"

    async def test_pay_before_receipt_is_conflict(self, api_client: AsyncClient, seeded):
        order = (
            await api_client.post(
                "/api/purchase-orders",
                json={
                    "supplier_id": seeded["supplier"]["id"],
                    "items": [{"product_id": seeded["product"]["id"], "quantity": 1}],
                },
            )
        ).json()

        response = await api_client.post(f"/api/purchase-orders/{order['id']}/pay", json={"amount": 5})

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATE"

    async def test_order_links_reorder_request(self, api_client: AsyncClient, seeded):
        product_id = seeded["product"]["id"]
        await _issue(api_client, seeded, 4)
        [request] = (await api_client.get("/api/products/reorders")).json()

        response = await api_client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": seeded["supplier"]["id"],
                "items": [{"product_id": product_id, "quantity": request["quantity"]}],
                "reorder_ids": [request["id"]],
            },
        )

        assert response.status_code == 201
        ordered = (
            await api_client.get("/api/products/reorders", params={"status": "Ordered"})
        ).json()
        assert [r["purchase_order_id"] for r in ordered] == [response.json()["id"]]

    async def test_unknown_reorder_request_is_404(self, api_client: AsyncClient, seeded):
        response = await api_client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": seeded["supplier"]["id"],
                "items": [{"product_id": seeded["product"]["id"], "quantity": 5}],
                "reorder_ids": ["missing"],
            },
        )

        assert response.status_code == 404
        assert response.json()["details"] == {"reorder_id": "missing"}


async def _received_order(api_client: AsyncClient, seeded: dict, quantity: int) -> dict:
    product_id = seeded["product"]["id"]
    order = (
        await api_client.post(
            "/api/purchase-orders",
            json={
                "supplier_id": seeded["supplier"]["id"],
                "items": [{"product_id": product_id, "quantity": quantity}],
            },
        )
    ).json()
    await api_client.post(f"/api/purchase-orders/{order['id']}/deliver")
    await api_client.post(
        f"/api/purchase-orders/{order['id']}/inspection",
        json={"lines": [{"product_id": product_id, "received": quantity}]},
    )
    return order


class TestSupplierReturnsAPI:
    async def test_return_cycle(self, api_client: AsyncClient, seeded):
        product_id = seeded["product"]["id"]
        order = await _received_order(api_client, seeded, 20)

        created = await api_client.post(
            "/api/supplier-returns",
            json={
                "purchase_order_id": order["id"],
                "reason": "dented",
                "items": [{"product_id": product_id, "quantity": 3}],
            },
        )

        assert created.status_code == 201
        rts = created.json()
        assert rts["rts_number"] == "RTS-000001"
        assert rts["status"] == "Pending"
        assert await _stock(api_client, product_id) == 27

        shipped = await api_client.post(f"/api/supplier-returns/{rts['id']}/ship")
        assert shipped.json()["status"] == "Shipped"
        cancelled = await api_client.post(f"/api/supplier-returns/{rts['id']}/cancel")
        assert cancelled.status_code == 409
        listed = (await api_client.get("/api/supplier-returns", params={"status": "Shipped"})).json()
        assert [r["id"] for r in listed] == [rts["id"]]

    async def test_more_than_returnable_is_422(self, api_client: AsyncClient, seeded):
        order = await _received_order(api_client, seeded, 5)

        response = await api_client.post(
            "/api/supplier-returns",
            json={
                "purchase_order_id": order["id"],
                "reason": "dented",
                "items": [{"product_id": seeded["product"]["id"], "quantity": 6}],
            },
        )

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_QUANTITY"
        assert await _stock(api_client, seeded["product"]["id"]) == 15


class TestPartOutAPI:
    async def test_part_out_tool(self, api_client: AsyncClient):
        tool = (await api_client.post("/api/tools", json={"name": "Drill"})).json()

        response = await api_client.post(
            "/api/disposals/part-out",
            json={
                "tool_ids": [tool["id"]],
                "parts": [{"name": "Motor"}, {"name": "Screw", "quantity": 4}],
                "disposed_by": "erin",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["records"][0]["reason"] == "For Parts Out"
        assert len(body["parts"]) == 2
        again = await api_client.post(
            "/api/disposals/part-out",
            json={"tool_ids": [tool["id"]], "parts": [{"name": "Motor"}], "disposed_by": "erin"},
        )
        assert again.status_code == 409
        parts = (
            await api_client.get("/api/disposals/salvaged-parts", params={"tool_id": tool["id"]})
        ).json()
        assert sorted(p["name"] for p in parts) == ["Motor", "Screw"]


class TestFabricationAPI:
    async def test_job_to_installation(self, api_client: AsyncClient, seeded):
        job = (
            await api_client.post(
                "/api/job-orders",
                json={"client_id": seeded["client"]["id"], "items": [{"description": "Gate"}]},
            )
        ).json()
        item_id = job["items"][0]["id"]

        for step in ("In Progress", "Completed", "QC Passed"):
            response = await api_client.post(
                f"/api/job-orders/{job['id']}/items/{item_id}/advance", json={"to_status": step}
            )
            assert response.status_code == 200, response.text

        ready = (await api_client.get("/api/job-orders/qc-passed")).json()
        assert len(ready) == 1

        scheduled = await api_client.post(
            "/api/installations",
            json={
                "crew_id": "crew-a",
                "start_date": "2024-06-03",
                "end_date": "2024-06-04",
                "items": [{"job_id": job["id"], "item_id": item_id}],
            },
        )
        assert scheduled.status_code == 201
        assert scheduled.json()["installation_number"] == "INST-000001"

        again = await api_client.post(
            "/api/installations",
            json={
                "crew_id": "crew-b",
                "start_date": "2024-06-05",
                "end_date": "2024-06-05",
                "items": [{"job_id": job["id"], "item_id": item_id}],
            },
        )
        assert again.status_code == 409

    async def test_cannot_dispatch_directly(self, api_client: AsyncClient, seeded):
        job = (
            await api_client.post(
                "/api/job-orders",
                json={"client_id": seeded["client"]["id"], "items": [{"description": "Gate"}]},
            )
        ).json()

        response = await api_client.post(
            f"/api/job-orders/{job['id']}/items/{job['items'][0]['id']}/advance",
            json={"to_status": "Dispatched"},
        )

        assert response.status_code == 409
