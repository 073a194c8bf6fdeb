"""Typed client for the Jul REST API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Literal, cast

import httpx

from jul_client.api.schemas import (
    CIProfile,
    CreateRepoRequest,
    PromoteRequest,
    SuggestionRequest,
    TriggerCIRequest,
)
from jul_client.config import ClientSettings
from jul_client.core.events import EventHandler, EventSubscription, iter_events
from jul_client.core.mappers import (
    map_array,
    map_attestation,
    map_change,
    map_commit,
    map_file_content,
    map_file_history_entry,
    map_file_node,
    map_job_response,
    map_promote_response,
    map_repo,
    map_suggestion,
    map_workspace,
)
from jul_client.core.pagination import normalize_paginated
from jul_client.core.queries import (
    AttestationsQuery,
    ChangesQuery,
    FileHistoryQuery,
    QueryParams,
    SuggestionsQuery,
    api_path,
    build_query,
    file_segment,
    ref_query,
    repo_path,
    with_query,
)
from jul_client.core.transport import HttpMethod, Transport
from jul_client.models.attestation import Attestation
from jul_client.models.change import Change, Commit, Suggestion
from jul_client.models.common import JobResponse, JSONValue, PaginatedResponse, PromoteResponse
from jul_client.models.events import JulEvent
from jul_client.models.files import FileContent, FileHistoryEntry, FileNode
from jul_client.models.repo import Repo, Workspace


class JulClient:
    """Client bound to one Jul server.

    Base URL and token are shared by every call made through this instance;
    :meth:`set_token` affects all requests that build their headers after it
    returns, including ones already scheduled but not yet sent.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        resolved = settings or ClientSettings()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=None)
        self._transport = Transport(
            self._http,
            base_url=base_url or resolved.api_url,
            token=token if token is not None else resolved.token,
        )

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_token(self, token: str | None) -> None:
        self._transport.token = token

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> JulClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request_json(
        self,
        method: HttpMethod,
        path: str,
        *,
        body: JSONValue = None,
    ) -> JSONValue:
        # Entity payloads are decoded whatever content type the server labels them with.
        return await self._transport.request(method, path, body=body, expect="json")

    # Repositories

    async def list_repos(self) -> tuple[Repo, ...]:
        payload = await self._request_json("GET", api_path("/repos"))
        return map_array(payload, map_repo)

    async def get_repo(self, name: str) -> Repo:
        return map_repo(await self._request_json("GET", api_path(f"/repos/{name}")))

    async def create_repo(
        self,
        name: str,
        *,
        description: str | None = None,
        visibility: Literal["public", "private"] | None = None,
    ) -> Repo:
        body = CreateRepoRequest(name=name, description=description, visibility=visibility)
        payload = await self._request_json("POST", api_path("/repos"), body=body.to_wire())
        return map_repo(payload)

    async def delete_repo(self, name: str) -> None:
        await self._transport.request("DELETE", api_path(f"/repos/{name}"))

    # Workspaces

    async def list_workspaces(self, repo: str) -> tuple[Workspace, ...]:
        payload = await self._request_json("GET", repo_path(repo, "/workspaces"))
        return map_array(payload, map_workspace)

    async def get_workspace(self, repo: str, workspace_id: str) -> Workspace:
        path = repo_path(repo, f"/workspaces/{workspace_id}")
        return map_workspace(await self._request_json("GET", path))

    async def promote(
        self,
        repo: str,
        workspace_id: str,
        *,
        target_branch: str,
        commit_sha: str | None = None,
    ) -> PromoteResponse:
        """Promote a workspace; a policy rejection surfaces as ``JulApiError``
        whose ``error.violations`` lists the failed checks."""
        body = PromoteRequest(target_branch=target_branch, commit_sha=commit_sha)
        path = repo_path(repo, f"/workspaces/{workspace_id}/promote")
        payload = await self._request_json("POST", path, body=body.to_wire())
        return map_promote_response(payload)

    # Changes

    async def list_changes(
        self,
        repo: str,
        query: ChangesQuery | None = None,
    ) -> PaginatedResponse[Change]:
        path = with_query(repo_path(repo, "/changes"), query)
        return normalize_paginated(await self._request_json("GET", path), map_change)

    async def get_change(self, repo: str, change_id: str) -> Change:
        path = repo_path(repo, f"/changes/{change_id}")
        return map_change(await self._request_json("GET", path))

    async def get_interdiff(self, repo: str, change_id: str, from_rev: int, to_rev: int) -> str:
        """Return the raw diff between two revisions of a change."""
        query = build_query([("from_rev", from_rev), ("to_rev", to_rev)])
        path = f"{repo_path(repo, f'/changes/{change_id}/interdiff')}{query}"
        payload = await self._transport.request("GET", path, expect="text")
        return cast(str, payload)

    # Commits and attestations

    async def get_commit(self, repo: str, sha: str) -> Commit:
        return map_commit(await self._request_json("GET", repo_path(repo, f"/commits/{sha}")))

    async def get_attestation(self, repo: str, sha: str) -> Attestation:
        path = repo_path(repo, f"/commits/{sha}/attestation")
        return map_attestation(await self._request_json("GET", path))

    async def list_attestations(
        self,
        repo: str,
        query: AttestationsQuery | None = None,
    ) -> PaginatedResponse[Attestation]:
        path = with_query(repo_path(repo, "/attestations"), query)
        return normalize_paginated(await self._request_json("GET", path), map_attestation)

    async def trigger_ci(
        self,
        repo: str,
        commit_sha: str,
        *,
        profile: CIProfile | None = None,
    ) -> JobResponse:
        body = TriggerCIRequest(commit_sha=commit_sha, profile=profile)
        payload = await self._request_json(
            "POST", repo_path(repo, "/ci/trigger"), body=body.to_wire()
        )
        return map_job_response(payload)

    # Suggestions

    async def list_suggestions(
        self,
        repo: str,
        query: SuggestionsQuery | None = None,
    ) -> tuple[Suggestion, ...]:
        path = with_query(repo_path(repo, "/suggestions"), query)
        return map_array(await self._request_json("GET", path), map_suggestion)

    async def get_suggestion(self, repo: str, suggestion_id: str) -> Suggestion:
        path = repo_path(repo, f"/suggestions/{suggestion_id}")
        return map_suggestion(await self._request_json("GET", path))

    async def request_suggestion(self, repo: str, *, change_id: str, reason: str) -> Suggestion:
        body = SuggestionRequest(change_id=change_id, reason=reason)
        payload = await self._request_json(
            "POST", repo_path(repo, "/suggestions"), body=body.to_wire()
        )
        return map_suggestion(payload)

    async def accept_suggestion(self, repo: str, suggestion_id: str) -> None:
        path = repo_path(repo, f"/suggestions/{suggestion_id}/accept")
        await self._transport.request("POST", path)

    async def reject_suggestion(self, repo: str, suggestion_id: str) -> None:
        path = repo_path(repo, f"/suggestions/{suggestion_id}/reject")
        await self._transport.request("POST", path)

    # Files

    async def get_file_tree(self, repo: str, ref: str = "HEAD") -> tuple[FileNode, ...]:
        path = f"{repo_path(repo, '/files')}{ref_query(ref)}"
        return map_array(await self._request_json("GET", path), map_file_node)

    async def get_file_content(self, repo: str, path: str, ref: str = "HEAD") -> FileContent:
        query = ref_query(ref)
        url_path = f"{repo_path(repo, f'/files/{file_segment(path)}/content')}{query}"
        return map_file_content(await self._request_json("GET", url_path))

    async def get_file_history(
        self,
        repo: str,
        path: str,
        query: FileHistoryQuery | None = None,
    ) -> tuple[FileHistoryEntry, ...]:
        url_path = with_query(repo_path(repo, f"/files/{file_segment(path)}/history"), query)
        return map_array(await self._request_json("GET", url_path), map_file_history_entry)

    # Query

    async def query(self, repo: str, params: QueryParams | None = None) -> tuple[Commit, ...]:
        """Search commits by attestation results, authorship and time window."""
        path = with_query(repo_path(repo, "/query"), params)
        return map_array(await self._request_json("GET", path), map_commit)

    # Events

    def events(self, repo: str, *, since: str | None = None) -> AsyncIterator[JulEvent]:
        """Pull-based event stream; leaving the ``async for`` loop closes it."""
        return iter_events(self._transport, repo, since=since)

    def subscribe_to_events(
        self,
        repo: str,
        handler: EventHandler,
        *,
        since: str | None = None,
    ) -> EventSubscription:
        """Open a dedicated stream and push every event to ``handler``.

        Must be called from a running event loop. The returned subscription's
        ``close()`` releases the connection.
        """
        subscription = EventSubscription(self.events(repo, since=since), handler, repo=repo)
        return subscription.start()


def create_client(
    settings: ClientSettings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> JulClient:
    """Build a client from ``JUL_*`` environment settings."""
    resolved = settings or ClientSettings()
    return JulClient(settings=resolved, http_client=http_client)
