"""API tests for the trade, dashboard and system routers."""

import pytest


def _eur_trade(**overrides) -> dict:
    body = {
        "user_id": "u-1",
        "title": "London open",
        "trade_pair": "eur/usd",
        "trade_type": "buy",
        "entry_price": 1.085,
        "exit_price": 1.09,
        "stop_loss": 1.08,
        "lot_size": 10000,
        "timeframe": "15m",
    }
    body.update(overrides)
    return body


@pytest.fixture
def stored(client):
    """Three stored trades: a win, a loss and one still open."""
    ids = []
    for body in (
        _eur_trade(),
        _eur_trade(trade_type="sell", entry_price=1.2, exit_price=1.205, lot_size=1000, stop_loss=None),
        _eur_trade(exit_price=None, user_id="u-2"),
    ):
        resp = client.post("/api/trades", json=body)
        assert resp.status_code == 201
        ids.append(resp.json()["id"])
    return ids


# ---------------------------------------------------------------------------
# 1. System
# ---------------------------------------------------------------------------

class TestSystem:
    def test_health(self, client):
        resp = client.get("/api/system/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_info(self, client, stored):
        data = client.get("/api/system/info").json()
        assert data["trade_count"] == 3
        assert data["storage_price_limit"] == 100000.0
        assert data["price_scale_factor"] == 10


# ---------------------------------------------------------------------------
# 2. Trades CRUD
# ---------------------------------------------------------------------------

class TestTrades:
    def test_create(self, client):
        resp = client.post("/api/trades", json=_eur_trade())
        assert resp.status_code == 201
        data = resp.json()
        assert data["instrument"] == "EUR/USD"
        assert data["direction"] == "long"
        assert data["status"] == "closed"
        assert data["pnl"] == 50.0
        assert data["result"] == "win"
        assert data["isRealized"] is True
        assert data["stopLoss"] == 1.08
        assert data["notes"] == "London open"

    def test_create_open_trade(self, client):
        data = client.post("/api/trades", json=_eur_trade(exit_price=None)).json()
        assert data["status"] == "open"
        assert data["exitPrice"] is None
        assert data["result"] == "pending"

    def test_create_scaled_trade(self, client):
        body = _eur_trade(trade_pair="BTC/USD", entry_price=105000, exit_price=110000,
                          stop_loss=100000, lot_size=0.5)
        data = client.post("/api/trades", json=body).json()
        assert data["entryPrice"] == 105000.0
        assert data["exitPrice"] == 110000.0
        assert data["stopLoss"] == 100000.0
        assert data["pnl"] == 2500.0
        assert "SCALED" not in data["notes"]

    def test_create_price_too_large(self, client):
        resp = client.post("/api/trades", json=_eur_trade(entry_price=2_000_000, exit_price=None))
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "field, value",
        [("trade_type", "hold"), ("timeframe", "2h"), ("entry_price", 0), ("lot_size", -1)],
    )
    def test_create_invalid(self, client, field, value):
        resp = client.post("/api/trades", json=_eur_trade(**{field: value}))
        assert resp.status_code == 422

    def test_list(self, client, stored):
        data = client.get("/api/trades").json()
        assert len(data) == 3
        assert {t["id"] for t in data} == set(stored)

    def test_list_filters(self, client, stored):
        assert len(client.get("/api/trades", params={"status": "closed"}).json()) == 2
        assert len(client.get("/api/trades", params={"user_id": "u-2"}).json()) == 1
        assert len(client.get("/api/trades", params={"instrument": "eur/usd"}).json()) == 3
        assert len(client.get("/api/trades", params={"limit": 1}).json()) == 1

    def test_get(self, client, stored):
        data = client.get(f"/api/trades/{stored[1]}").json()
        assert data["direction"] == "short"
        assert data["pnl"] == -5.0

    def test_get_missing(self, client):
        assert client.get("/api/trades/nope").status_code == 404

    def test_update(self, client, stored):
        resp = client.put(f"/api/trades/{stored[2]}", json={"exit_price": 1.1})
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "closed"
        assert data["pnl"] == 150.0

    def test_cancel(self, client, stored):
        data = client.put(f"/api/trades/{stored[0]}", json={"status": "cancelled"}).json()
        assert data["status"] == "cancelled"
        assert data["pnl"] == 0.0

    def test_update_invalid_merge(self, client, stored):
        resp = client.put(f"/api/trades/{stored[0]}", json={"trade_pair": "   "})
        assert resp.status_code == 422

    def test_update_null_required(self, client, stored):
        resp = client.put(f"/api/trades/{stored[0]}", json={"entry_price": None})
        assert resp.status_code == 422

    def test_update_missing(self, client):
        assert client.put("/api/trades/nope", json={"notes": "x"}).status_code == 404

    def test_delete(self, client, stored):
        assert client.delete(f"/api/trades/{stored[0]}").status_code == 204
        assert client.get(f"/api/trades/{stored[0]}").status_code == 404
        assert client.delete(f"/api/trades/{stored[0]}").status_code == 404


# ---------------------------------------------------------------------------
# 3. Dashboard
# ---------------------------------------------------------------------------

class TestDashboard:
    def test_stats(self, client, stored):
        data = client.get("/api/dashboard/stats").json()
        assert data["totalTrades"] == 3
        assert data["closedTrades"] == 2
        assert data["openTrades"] == 1
        assert data["winRate"] == 50.0
        assert data["netPnL"] == 45.0
        assert data["bestTrade"] == 50.0
        assert data["worstTrade"] == -5.0
        assert data["averageRiskReward"] == 0.5
        assert data["totalVolume"] == 22900.0
        assert [p["cumulativePnL"] for p in data["equityCurve"]] == [50.0, 45.0]

    def test_stats_for_user(self, client, stored):
        data = client.get("/api/dashboard/stats", params={"user_id": "u-2"}).json()
        assert data["totalTrades"] == 1
        assert data["closedTrades"] == 0
        assert data["equityCurve"] == []

    def test_stats_empty(self, client):
        data = client.get("/api/dashboard/stats").json()
        assert data["winRate"] == 0.0
        assert data["netPnL"] == 0.0
        assert data["bestTrade"] == 0.0
        assert data["worstTrade"] == 0.0

    def test_equity(self, client, stored):
        data = client.get("/api/dashboard/equity").json()
        assert [p["tradeIndex"] for p in data] == [1, 2]
        assert data[-1]["cumulativePnL"] == 45.0


class TestAnalyze:
    def _records(self):
        return [
            {
                "_id": "rest-1",
                "tradePair": "BTC/USD",
                "tradeType": "long",
                "entryPrice": 64000,
                "exitPrice": 65000,
                "positionSize": 0.1,
                "status": "tp_hit",
                "createdAt": "2024-03-02T14:00:00Z",
            },
            {
                "id": "row-1",
                "trade_pair": "BTC/USD",
                "trade_type": "buy",
                "entry_price": 10500,
                "exit_price": 10400,
                "lot_size": 1,
                "status": "closed",
                "notes": "[SCALED_x10] faded",
                "created_at": "2024-03-03T09:00:00Z",
            },
            {"tradePair": "ETH/USD"},
        ]

    def test_mixed_shapes(self, client):
        resp = client.post("/api/dashboard/analyze", json={"trades": self._records()})
        assert resp.status_code == 200
        data = resp.json()
        assert data["stats"]["totalTrades"] == 2
        assert data["stats"]["netPnL"] == -900.0
        assert [t["pnl"] for t in data["trades"]] == [100.0, -1000.0]
        assert data["trades"][1]["entryPrice"] == 105000.0
        assert data["rejected"] == [
            {"index": 2, "field": "entry_price", "message": "required field is missing"}
        ]

    def test_strict(self, client):
        resp = client.post("/api/dashboard/analyze", json={"trades": self._records(), "strict": True})
        assert resp.status_code == 422
        assert resp.json()["detail"]["index"] == 2

    def test_nothing_to_analyze(self, client):
        data = client.post("/api/dashboard/analyze", json={"trades": []}).json()
        assert data["stats"]["equityCurve"] == []
        assert data["trades"] == []
