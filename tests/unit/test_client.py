from __future__ import annotations

import json

import httpx
import pytest

from jul_client.client import JulClient, create_client
from jul_client.config import ClientSettings
from jul_client.core.queries import (
    AttestationsQuery,
    ChangesQuery,
    FileHistoryQuery,
    QueryParams,
    SuggestionsQuery,
)
from jul_client.core.transport import JulApiError
from jul_client.models.common import ApiError
from tests.support.jul_helpers import (
    RecordingHandler,
    json_response,
    make_client,
    text_response,
)


@pytest.mark.asyncio
async def test_list_changes_wraps_bare_array() -> None:
    handler = RecordingHandler(json_response(200, [{"id": 1}, {"id": 2}]))
    client = make_client(handler)

    page = await client.list_changes("demo")

    assert len(page.items) == 2
    assert (page.total, page.limit, page.offset) == (2, 2, 0)
    assert handler.last_path() == "/demo.jul/api/v1/changes"


@pytest.mark.asyncio
async def test_list_changes_sends_filters_in_order() -> None:
    handler = RecordingHandler(
        json_response(200, {"items": [{"change_id": "I1"}], "total": 9, "limit": 1, "offset": 3})
    )
    client = make_client(handler)

    page = await client.list_changes("demo", ChangesQuery(status="draft", limit=1, offset=3))

    assert handler.last_path() == "/demo.jul/api/v1/changes?status=draft&limit=1&offset=3"
    assert page.items[0].change_id == "I1"
    assert page.total == 9


@pytest.mark.asyncio
async def test_get_repo_not_found_surfaces_status_and_payload() -> None:
    client = make_client(
        RecordingHandler(json_response(404, {"error": "not_found", "message": "repo missing"}))
    )

    with pytest.raises(JulApiError) as exc_info:
        await client.get_repo("ghost")

    assert exc_info.value.status == 404
    assert exc_info.value.error == ApiError(error="not_found", message="repo missing")


@pytest.mark.asyncio
async def test_repository_endpoints() -> None:
    repo = {"id": "r1", "name": "alpha", "visibility": "private", "default_branch": "main"}
    handler = RecordingHandler(
        json_response(200, [repo]),
        json_response(201, repo),
        json_response(204, None),
    )
    client = make_client(handler)

    repos = await client.list_repos()
    created = await client.create_repo("alpha", visibility="private")
    await client.delete_repo("alpha")

    assert repos[0].default_branch == "main"
    assert created.visibility == "private"
    assert handler.requests[0].url.path == "/api/v1/repos"
    assert handler.requests[1].method == "POST"
    assert handler.requests[1].content == b'{"name": "alpha", "visibility": "private"}'
    assert handler.requests[2].method == "DELETE"
    assert handler.requests[2].url.path == "/api/v1/repos/alpha"


@pytest.mark.asyncio
async def test_workspace_endpoints_and_promote_body() -> None:
    handler = RecordingHandler(
        json_response(200, [{"id": "ws", "head_commit": "abc"}]),
        json_response(200, {"id": "ws", "headCommit": "abc"}),
        json_response(200, {"success": True, "ref": "refs/heads/main", "commit_sha": "abc"}),
    )
    client = make_client(handler)

    workspaces = await client.list_workspaces("demo")
    workspace = await client.get_workspace("demo", "ws")
    result = await client.promote("demo", "ws", target_branch="main")

    assert workspaces[0].head_commit == "abc"
    assert workspace.head_commit == "abc"
    assert result.success is True
    assert result.commit_sha == "abc"
    assert handler.requests[1].url.path == "/demo.jul/api/v1/workspaces/ws"
    assert handler.last.url.path == "/demo.jul/api/v1/workspaces/ws/promote"
    assert handler.last_json() == {"target_branch": "main"}


@pytest.mark.asyncio
async def test_promote_policy_rejection_carries_violations() -> None:
    client = make_client(
        RecordingHandler(
            json_response(
                409,
                {
                    "error": "policy_violation",
                    "message": "checks failed",
                    "violations": [{"check": "coverage", "status": "fail", "message": "62%"}],
                },
            )
        )
    )

    with pytest.raises(JulApiError) as exc_info:
        await client.promote("demo", "ws", target_branch="main", commit_sha="abc")

    assert exc_info.value.kind == "policy_violation"
    assert exc_info.value.error.violations[0].check == "coverage"


@pytest.mark.asyncio
async def test_get_change_and_interdiff_text() -> None:
    handler = RecordingHandler(
        json_response(200, {"changeId": "I1", "status": "published"}),
        text_response(200, "diff --git a/x b/x\n"),
    )
    client = make_client(handler)

    change = await client.get_change("demo", "I1")
    diff = await client.get_interdiff("demo", "I1", 1, 3)

    assert change.status == "published"
    assert diff == "diff --git a/x b/x\n"
    assert handler.last_path() == "/demo.jul/api/v1/changes/I1/interdiff?from_rev=1&to_rev=3"


@pytest.mark.asyncio
async def test_commit_and_attestation_endpoints() -> None:
    handler = RecordingHandler(
        json_response(200, {"sha": "abc", "change_id": "I1"}),
        json_response(200, {"attestation_id": "a1", "signals": {"test": {"status": "pass"}}}),
        json_response(200, {"items": [{"attestation_id": "a1"}]}),
        json_response(202, {"job_id": "job-7"}),
    )
    client = make_client(handler)

    commit = await client.get_commit("demo", "abc")
    attestation = await client.get_attestation("demo", "abc")
    page = await client.list_attestations(
        "demo", AttestationsQuery(commit_sha="abc", status="pass")
    )
    job = await client.trigger_ci("demo", "abc", profile="lint")

    assert commit.change_id == "I1"
    assert attestation.signals.test is not None
    assert attestation.signals.coverage is None
    assert handler.requests[1].url.path == "/demo.jul/api/v1/commits/abc/attestation"
    assert handler.requests[2].url.raw_path == (
        b"/demo.jul/api/v1/attestations?commit_sha=abc&status=pass"
    )
    assert (page.total, page.limit, page.offset) == (1, 1, 0)
    assert job.job_id == "job-7"
    assert handler.last_json() == {"commit_sha": "abc", "profile": "lint"}


@pytest.mark.asyncio
async def test_suggestion_endpoints() -> None:
    suggestion = {"suggestion_id": "s1", "change_id": "I1", "status": "open"}
    handler = RecordingHandler(
        json_response(200, [suggestion]),
        json_response(200, suggestion),
        json_response(201, suggestion),
        json_response(200, {}),
        json_response(200, {}),
    )
    client = make_client(handler)

    listed = await client.list_suggestions("demo", SuggestionsQuery(change_id="I1"))
    fetched = await client.get_suggestion("demo", "s1")
    requested = await client.request_suggestion("demo", change_id="I1", reason="flaky test")
    await client.accept_suggestion("demo", "s1")
    await client.reject_suggestion("demo", "s1")

    assert listed[0].suggestion_id == "s1"
    assert fetched.status == "open"
    assert requested.change_id == "I1"
    assert handler.requests[0].url.raw_path == b"/demo.jul/api/v1/suggestions?change_id=I1"
    assert handler.requests[2].method == "POST"
    assert handler.requests[3].url.path == "/demo.jul/api/v1/suggestions/s1/accept"
    assert handler.requests[4].url.path == "/demo.jul/api/v1/suggestions/s1/reject"


@pytest.mark.asyncio
async def test_request_suggestion_body() -> None:
    handler = RecordingHandler(json_response(201, {"suggestion_id": "s1"}))
    client = make_client(handler)

    await client.request_suggestion("demo", change_id="I1", reason="flaky test")

    assert handler.last_json() == {"change_id": "I1", "reason": "flaky test"}


@pytest.mark.asyncio
async def test_file_endpoints_quote_paths() -> None:
    handler = RecordingHandler(
        json_response(200, [{"name": "src", "type": "directory", "children": []}]),
        json_response(200, {"path": "src/main.py", "content": "x", "encoding": "utf-8"}),
        json_response(200, [{"commit_sha": "abc", "change_type": "add"}]),
    )
    client = make_client(handler)

    tree = await client.get_file_tree("demo")
    content = await client.get_file_content("demo", "src/main.py", ref="main")
    history = await client.get_file_history("demo", "src/main.py", FileHistoryQuery(limit=5))

    assert tree[0].children == ()
    assert content.encoding == "utf-8"
    assert history[0].change_type == "add"
    assert handler.requests[0].url.raw_path == b"/demo.jul/api/v1/files?ref=HEAD"
    assert handler.requests[1].url.raw_path == (
        b"/demo.jul/api/v1/files/src%2Fmain.py/content?ref=main"
    )
    assert handler.requests[2].url.raw_path == (
        b"/demo.jul/api/v1/files/src%2Fmain.py/history?limit=5"
    )


@pytest.mark.asyncio
async def test_query_commits() -> None:
    handler = RecordingHandler(json_response(200, [{"sha": "abc"}, {"sha": "def"}]))
    client = make_client(handler)

    commits = await client.query("demo", QueryParams(tests="fail", compiles=True, limit=2))

    assert [commit.sha for commit in commits] == ["abc", "def"]
    assert handler.last_path() == "/demo.jul/api/v1/query?tests=fail&compiles=true&limit=2"


@pytest.mark.asyncio
async def test_list_endpoint_tolerates_non_array_payload() -> None:
    client = make_client(RecordingHandler(json_response(200, {"unexpected": True})))
    assert await client.list_workspaces("demo") == ()


@pytest.mark.asyncio
async def test_set_token_applies_to_subsequent_calls() -> None:
    handler = RecordingHandler(json_response(200, []), json_response(200, []))
    client = make_client(handler)

    await client.list_repos()
    client.set_token("fresh")
    await client.list_repos()

    assert "authorization" not in handler.requests[0].headers
    assert handler.requests[1].headers["authorization"] == "Bearer fresh"


@pytest.mark.asyncio
async def test_client_defaults_from_settings() -> None:
    settings = ClientSettings(api_url="http://jul.example/", token="env-token")

    async with create_client(settings) as client:
        assert client.base_url == "http://jul.example"
        assert client.transport.token == "env-token"

    async with JulClient("http://override", settings=settings) as client:
        assert client.base_url == "http://override"
        assert client.transport.token == "env-token"


@pytest.mark.asyncio
async def test_entity_decoded_regardless_of_content_type() -> None:
    handler = RecordingHandler(
        httpx.Response(200, text='{"name": "alpha", "default_branch": "main"}'),
        httpx.Response(200, content=b'[{"sha": "abc"}]'),
    )
    client = make_client(handler)

    repo = await client.get_repo("alpha")
    commits = await client.query("demo")

    assert repo.name == "alpha"
    assert repo.default_branch == "main"
    assert [commit.sha for commit in commits] == ["abc"]


@pytest.mark.asyncio
async def test_non_json_success_body_raises() -> None:
    client = make_client(RecordingHandler(text_response(200, "<html>gateway</html>")))

    with pytest.raises(json.JSONDecodeError):
        await client.get_repo("alpha")


@pytest.mark.asyncio
async def test_file_ref_is_percent_encoded() -> None:
    handler = RecordingHandler(json_response(200, []), json_response(200, {"path": "a"}))
    client = make_client(handler)

    await client.get_file_tree("demo", ref="release 1+2")
    await client.get_file_content("demo", "a", ref="release 1+2")

    assert handler.requests[0].url.raw_path == b"/demo.jul/api/v1/files?ref=release%201%2B2"
    assert handler.requests[1].url.raw_path == (
        b"/demo.jul/api/v1/files/a/content?ref=release%201%2B2"
    )
