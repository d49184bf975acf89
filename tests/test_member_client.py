"""Tests for the createMember GraphQL client."""

import json

import httpx
import pytest

from memberimport.schemas.import_schemas import MemberRecord
from memberimport.services.import_service import SubmissionChannelError, SubmissionError
from memberimport.services.member_client import CREATE_MEMBER_MUTATION, MemberClient

GRAPHQL_URL = "http://members.test/graphql"


def _client(handler, api_token: str | None = "secret-token") -> MemberClient:
    return MemberClient(
        graphql_url=GRAPHQL_URL,
        organisation_id="org-1",
        branch_id="branch-1",
        api_token=api_token,
        transport=httpx.MockTransport(handler),
    )


def _record() -> MemberRecord:
    return MemberRecord(firstName="John", lastName="Doe", email="john@example.com", gender="MALE")


def test_requires_organisation_and_branch() -> None:
    with pytest.raises(ValueError, match="organisation and branch"):
        MemberClient(graphql_url=GRAPHQL_URL, organisation_id="org-1", branch_id="")


def test_build_input_adds_scope() -> None:
    client = _client(lambda request: httpx.Response(200))
    assert client.build_input(_record()) == {
        "organisationId": "org-1",
        "branchId": "branch-1",
        "firstName": "John",
        "lastName": "Doe",
        "email": "john@example.com",
        "gender": "MALE",
    }


@pytest.mark.asyncio
async def test_create_member_success() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            200,
            json={"data": {"createMember": {"id": "m-42", "firstName": "John", "lastName": "Doe", "email": None}}},
        )

    created = await _client(handler).create_member(_record())

    assert created.id == "m-42"
    assert created.first_name == "John"

    request = captured[0]
    assert str(request.url) == GRAPHQL_URL
    assert request.headers["Authorization"] == "Bearer secret-token"
    body = json.loads(request.content)
    assert body["query"] == CREATE_MEMBER_MUTATION
    assert body["variables"]["createMemberInput"]["branchId"] == "branch-1"
    assert "middleName" not in body["variables"]["createMemberInput"]


@pytest.mark.asyncio
async def test_client_is_callable_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200, json={"data": {"createMember": {"id": "m-1"}}})

    created = await _client(handler, api_token=None)(_record())
    assert created.id == "m-1"


@pytest.mark.asyncio
async def test_graphql_error_rejects_record() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"errors": [{"message": "Email already exists", "extensions": {"code": "BAD_USER_INPUT"}}]},
        )

    with pytest.raises(SubmissionError, match="Email already exists") as exc_info:
        await _client(handler).create_member(_record())
    assert not isinstance(exc_info.value, SubmissionChannelError)


@pytest.mark.asyncio
async def test_graphql_unauthenticated_is_channel_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"errors": [{"message": "Not logged in", "extensions": {"code": "UNAUTHENTICATED"}}]},
        )

    with pytest.raises(SubmissionChannelError, match="Not logged in"):
        await _client(handler).create_member(_record())


@pytest.mark.asyncio
async def test_http_401_is_channel_error() -> None:
    with pytest.raises(SubmissionChannelError):
        await _client(lambda request: httpx.Response(401)).create_member(_record())


@pytest.mark.asyncio
async def test_http_500_rejects_record() -> None:
    with pytest.raises(SubmissionError, match="Member API returned 500"):
        await _client(lambda request: httpx.Response(500, text="boom")).create_member(_record())


@pytest.mark.asyncio
async def test_invalid_json() -> None:
    with pytest.raises(SubmissionError, match="invalid JSON"):
        await _client(lambda request: httpx.Response(200, text="<html>")).create_member(_record())


@pytest.mark.asyncio
async def test_missing_data() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"createMember": None}})

    with pytest.raises(SubmissionError, match="Failed to create member"):
        await _client(handler).create_member(_record())


@pytest.mark.asyncio
async def test_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(SubmissionError, match="timed out"):
        await _client(handler).create_member(_record())


@pytest.mark.asyncio
async def test_connection_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SubmissionError, match="request failed"):
        await _client(handler).create_member(_record())
