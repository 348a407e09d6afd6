"""Integration tests for lot API endpoints."""

from datetime import date
from decimal import Decimal

from models import HoldingLot
from services.lot_ledger_service import LotLedgerService
from tests.fixtures import create_lot


class TestCreateLot:
    def test_create_manual_lot(self, client, db, account, security):
        response = client.post(
            f"/api/accounts/{account.id}/lots",
            json={
                "ticker": "aapl",
                "acquisition_date": "2023-03-01",
                "cost_basis_per_unit": "150.25",
                "quantity": "10",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["ticker"] == "AAPL"
        assert data["security_id"] == security.id
        assert data["source"] == "manual"
        assert Decimal(data["current_quantity"]) == Decimal("10")
        assert Decimal(data["total_cost_basis"]) == Decimal("1502.5")
        assert db.query(HoldingLot).filter_by(id=data["id"]).count() == 1

    def test_unknown_account(self, client, security):
        response = client.post(
            "/api/accounts/missing/lots",
            json={
                "ticker": "AAPL",
                "acquisition_date": "2023-03-01",
                "cost_basis_per_unit": "1",
                "quantity": "1",
            },
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Account not found"

    def test_unknown_ticker(self, client, account):
        response = client.post(
            f"/api/accounts/{account.id}/lots",
            json={
                "ticker": "NOPE",
                "acquisition_date": "2023-03-01",
                "cost_basis_per_unit": "1",
                "quantity": "1",
            },
        )
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "unknown_symbol"

    def test_non_positive_quantity(self, client, account, security):
        response = client.post(
            f"/api/accounts/{account.id}/lots",
            json={
                "ticker": "AAPL",
                "acquisition_date": "2023-03-01",
                "cost_basis_per_unit": "1",
                "quantity": "0",
            },
        )
        assert response.status_code == 422


class TestSecurityLots:
    def test_lists_open_lots_oldest_first(self, client, db, account, security):
        newer = create_lot(db, account, security, "5", "120", date(2024, 2, 1))
        older = create_lot(db, account, security, "10", "100", date(2022, 2, 1))
        closed = create_lot(db, account, security, "3", "90", date(2021, 2, 1))
        LotLedgerService(db).close_lot(closed.id)

        response = client.get(f"/api/securities/{security.id}/lots")

        assert response.status_code == 200
        assert [lot["id"] for lot in response.json()] == [older.id, newer.id]

    def test_include_closed(self, client, db, account, security):
        lot = create_lot(db, account, security, "3", "90")
        LotLedgerService(db).close_lot(lot.id)

        response = client.get(
            f"/api/securities/{security.id}/lots", params={"include_closed": True}
        )

        data = response.json()
        assert len(data) == 1
        assert data[0]["is_closed"] is True
        assert Decimal(data[0]["cost_basis_per_unit"]) == Decimal("90")

    def test_unknown_security(self, client):
        response = client.get("/api/securities/missing/lots")
        assert response.status_code == 404
