"""Client for the remote createMember GraphQL operation."""

import logging
from typing import Any

import httpx

from memberimport.config import settings
from memberimport.schemas.import_schemas import CreatedMember, MemberRecord
from memberimport.services.import_service.errors import (
    SubmissionChannelError,
    SubmissionError,
)

logger = logging.getLogger(__name__)

CREATE_MEMBER_MUTATION = """
mutation CreateMember($createMemberInput: CreateMemberInput!) {
  createMember(createMemberInput: $createMemberInput) {
    id
    firstName
    lastName
    email
  }
}
"""


class MemberClient:
    """Creates members through the administration API, scoped to one branch.

    Instances are awaitable callables so they can be handed to the import
    orchestrator as its submit operation.
    """

    def __init__(
        self,
        graphql_url: str,
        organisation_id: str,
        branch_id: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not organisation_id or not branch_id:
            raise ValueError("An organisation and branch are required to create members")
        self.graphql_url = graphql_url
        self.organisation_id = organisation_id
        self.branch_id = branch_id
        self.api_token = api_token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "MemberClient":
        """Build a client from the remote API configuration."""
        return cls(
            graphql_url=settings.graphql_url,
            organisation_id=settings.organisation_id,
            branch_id=settings.branch_id,
            api_token=settings.api_token,
            timeout=settings.remote_timeout_seconds,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def build_input(self, record: MemberRecord) -> dict[str, Any]:
        """createMemberInput variables for a record."""
        return {
            "organisationId": self.organisation_id,
            "branchId": self.branch_id,
            **record.to_payload(),
        }

    async def create_member(self, record: MemberRecord) -> CreatedMember:
        """Create one member.

        Raises:
            SubmissionChannelError: If the API refuses our credentials.
            SubmissionError: If the request fails or the API rejects the record.
        """
        payload = {
            "query": CREATE_MEMBER_MUTATION,
            "variables": {"createMemberInput": self.build_input(record)},
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.graphql_url, json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            raise SubmissionError("Member API request timed out") from e
        except httpx.HTTPError as e:
            raise SubmissionError(f"Member API request failed: {e}") from e

        if response.status_code in (401, 403):
            raise SubmissionChannelError(
                f"Member API refused credentials ({response.status_code})"
            )
        if response.status_code >= 400:
            logger.error("Member API error: %s - %s", response.status_code, response.text)
            raise SubmissionError(f"Member API returned {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise SubmissionError("Member API returned invalid JSON") from e

        errors = body.get("errors")
        if errors:
            messages = "; ".join(err.get("message", "Unknown error") for err in errors)
            codes = {(err.get("extensions") or {}).get("code") for err in errors}
            if codes & {"UNAUTHENTICATED", "FORBIDDEN"}:
                raise SubmissionChannelError(messages)
            raise SubmissionError(messages)

        created = (body.get("data") or {}).get("createMember")
        if not created:
            raise SubmissionError("Failed to create member")

        return CreatedMember.model_validate(created)

    async def __call__(self, record: MemberRecord) -> CreatedMember:
        return await self.create_member(record)
