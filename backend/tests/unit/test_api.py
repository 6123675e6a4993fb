"""Tests for the HTTP surface, backed by the in-memory store."""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from arena.api import create_app
from arena.container import Container
from arena.models import MatchStatus, PredictionType


def bet_body(match_id: int, amount=500, **overrides) -> dict:
    body = {
        "agentId": "agent-1",
        "secretKey": "s3cret",
        "matchId": match_id,
        "prediction": "HOME_TEAM",
        "betAmount": amount,
        "confidence": 72,
        "summary": "Hosts have won five straight at home",
        "keyPoints": ["home form", "rested squad"],
        "analysisStats": {"possession": 58},
    }
    body.update(overrides)
    return body


@pytest.fixture
def build_client(store, clock, settlement, make_settings):
    def build(environment: str = "development") -> TestClient:
        container = Container(
            make_settings(environment=environment),
            store,
            clock=clock,
            settlement=settlement,
        )
        return TestClient(create_app(container=container))

    return build


@pytest.fixture
def open_match(seed, kickoff_tomorrow):
    async def setup():
        await seed.agent()
        return await seed.match(kickoff_tomorrow)

    return asyncio.run(setup())


def test_health(build_client) -> None:
    with build_client() as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_place_bet(build_client, open_match) -> None:
    with build_client() as client:
        response = client.post("/api/v1/bets", json=bet_body(open_match.id))

    assert response.status_code == 200
    body = response.json()
    assert Decimal(str(body["betOdd"])) == Decimal("1.98")
    assert Decimal(str(body["remainingBalance"])) == Decimal("9500")
    assert body["predictionType"] == "HOME_TEAM"
    assert body["matchId"] == open_match.id
    assert body["agentName"] == "Agent-1"


def test_wrong_secret_is_401(build_client, open_match) -> None:
    with build_client() as client:
        response = client.post(
            "/api/v1/bets", json=bet_body(open_match.id, secretKey="wrong")
        )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid agent credentials."


def test_unknown_match_is_404(build_client, open_match) -> None:
    with build_client() as client:
        response = client.post("/api/v1/bets", json=bet_body(9999))

    assert response.status_code == 404
    assert response.json()["detail"] == "Match with ID 9999 not found."


def test_above_ceiling_is_400(build_client, open_match) -> None:
    with build_client() as client:
        response = client.post("/api/v1/bets", json=bet_body(open_match.id, amount=2500))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "ABOVE_CEILING"
    assert Decimal(body["limit"]) == Decimal("2000")


def test_deadline_passed_is_409(build_client, seed, clock) -> None:
    async def setup():
        await seed.agent()
        return await seed.match(clock.now() + timedelta(minutes=3))

    match = asyncio.run(setup())

    with build_client() as client:
        response = client.post("/api/v1/bets", json=bet_body(match.id))

    assert response.status_code == 409
    assert response.json()["status"] == "BETTING_CLOSED"
    assert match.status == MatchStatus.BETTING_CLOSED


@pytest.mark.parametrize(
    "overrides",
    [
        {"keyPoints": []},
        {"summary": "x" * 101},
        {"prediction": "HOME_WIN"},
        {"confidence": 101},
        {"betAmount": "100.001"},
    ],
)
def test_malformed_request_is_422(build_client, open_match, overrides) -> None:
    with build_client() as client:
        response = client.post("/api/v1/bets", json=bet_body(open_match.id, **overrides))

    assert response.status_code == 422


def test_balance(build_client, open_match) -> None:
    with build_client() as client:
        client.post("/api/v1/bets", json=bet_body(open_match.id, amount=1000))
        response = client.post(
            "/api/v1/agents/balance",
            json={"agentId": "agent-1", "secretKey": "s3cret"},
        )

    assert response.status_code == 200
    assert Decimal(str(response.json()["balance"])) == Decimal("9000")


def test_manual_settlement(build_client, seed, fetcher, last_week_kickoff) -> None:
    async def setup():
        agent = await seed.agent()
        match = await seed.match(last_week_kickoff, status=MatchStatus.BETTING_CLOSED)
        await seed.prediction(agent, match, PredictionType.DRAW, "100", "3.2")
        fetcher.finish(match.api_id, PredictionType.DRAW, 0, 0)
        return agent

    agent = asyncio.run(setup())

    with build_client() as client:
        response = client.post("/api/v1/admin/settlement/run")

    assert response.status_code == 200
    body = response.json()
    assert body["matchesSettled"] == 1
    assert body["predictionsResolved"] == 1
    assert agent.balance == Decimal("10320")


def test_manual_settlement_forbidden_in_production(build_client, fetcher) -> None:
    with build_client("production") as client:
        response = client.post("/api/v1/admin/settlement/run")

    assert response.status_code == 403
    assert fetcher.calls == []
