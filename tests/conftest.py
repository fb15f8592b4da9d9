"""Shared fixtures: an in-memory forum API served through httpx.MockTransport."""

import json
import re
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest
import pytest_asyncio

from tripforum.auth.identity import Viewer, ViewerSession
from tripforum.comments.models import Post
from tripforum.comments.tree import CommentTree
from tripforum.config.settings import Settings
from tripforum.dependencies import ForumDependencies, build_dependencies


DUPLICATE_CODE = 1022


@dataclass
class Failure:
    method: str
    pattern: re.Pattern[str]
    status: int | None = None
    body: Any = None
    exc: Exception | None = None
    text: str | None = None


@dataclass
class FakeForumServer:
    """Minimal stand-in for the forum backend."""

    comments: dict[str, dict[str, Any]] = field(default_factory=dict)
    reactions: dict[tuple[str, str], dict[str, str]] = field(default_factory=dict)
    reports: set[tuple[str, str, str]] = field(default_factory=set)
    report_bodies: list[dict[str, Any]] = field(default_factory=list)
    saved: dict[str, set[str]] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    headers: list[httpx.Headers] = field(default_factory=list)
    failures: list[Failure] = field(default_factory=list)
    _seq: int = 0

    # ------------------------------------------------------------------
    # Seeding and failure injection
    # ------------------------------------------------------------------

    def add_comment(
        self,
        post_id: str,
        author: str = "bob@example.com",
        content: str = "hello",
        parent_id: str | None = None,
    ) -> str:
        self._seq += 1
        comment_id = str(100 + self._seq)
        self.comments[comment_id] = {
            "forumCommentId": int(comment_id),
            "forumPostId": int(post_id),
            "parentCommentId": int(parent_id) if parent_id else None,
            "userEmail": author,
            "username": author.split("@")[0],
            "userAvatar": None,
            "content": content,
            "createdAt": (
                datetime(2024, 5, 1, tzinfo=UTC) + timedelta(minutes=self._seq)
            ).isoformat(),
            "_seq": self._seq,
        }
        return comment_id

    def set_reaction(self, target_type: str, target_id: str, email: str, kind: str):
        self.reactions.setdefault((target_type, target_id), {})[email] = kind

    def fail(
        self,
        method: str,
        path_regex: str,
        status: int | None = None,
        body: Any = None,
        exc: Exception | None = None,
        text: str | None = None,
    ) -> None:
        """Make the next matching request fail once.

        ``text`` sends a raw (non-JSON) body; combine it with a 200 status to
        simulate a success response the client cannot decode.
        """
        self.failures.append(
            Failure(method, re.compile(path_regex), status, body, exc, text)
        )

    def count_calls(self, method: str, path_regex: str) -> int:
        pattern = re.compile(path_regex)
        return sum(1 for m, p in self.calls if m == method and pattern.search(p))

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    def _public(self, comment: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in comment.items() if not k.startswith("_")}

    def _newest_first(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        ordered = sorted(items, key=lambda c: c["_seq"], reverse=True)
        return [self._public(c) for c in ordered]

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        self.calls.append((method, path))
        self.headers.append(request.headers)

        for failure in list(self.failures):
            if failure.method == method and failure.pattern.search(path):
                self.failures.remove(failure)
                if failure.exc is not None:
                    raise failure.exc
                if failure.text is not None:
                    return httpx.Response(failure.status or 500, text=failure.text)
                return httpx.Response(failure.status or 500, json=failure.body)

        params = request.url.params
        body = json.loads(request.content) if request.content else None

        for route, fn in self._routes():
            if route[0] != method:
                continue
            match = re.fullmatch(route[1], path)
            if match:
                return fn(match, params, body, request)
        return httpx.Response(404, json={"message": "no route"})

    def _routes(self) -> list[tuple[tuple[str, str], Callable[..., httpx.Response]]]:
        return [
            (("GET", r"/api/comments/post/(\w+)"), self._list_by_post),
            (("GET", r"/api/comments/(\w+)/replies"), self._list_replies),
            (("POST", r"/api/comments"), self._create_comment),
            (("PUT", r"/api/comments/(\w+)"), self._update_comment),
            (("DELETE", r"/api/comments/(\w+)"), self._delete_comment),
            (("GET", r"/api/reactions/(post|comment)/(\w+)/summary"), self._summary),
            (("POST", r"/api/reactions/add"), self._reaction_add),
            (("POST", r"/api/reactions/delete"), self._reaction_delete),
            (("GET", r"/api/reports/check"), self._report_check),
            (("POST", r"/api/reports/create"), self._report_create),
            (("GET", r"/api/saved-posts/check/(\w+)"), self._saved_check),
            (("GET", r"/api/saved-posts/count/(\w+)"), self._saved_count),
            (("POST", r"/api/saved-posts/save"), self._save),
            (("DELETE", r"/api/saved-posts/unsave/(\w+)"), self._unsave),
        ]

    def _list_by_post(self, match, params, body, request) -> httpx.Response:
        post_id = int(match.group(1))
        items = [c for c in self.comments.values() if c["forumPostId"] == post_id]
        return httpx.Response(200, json=self._newest_first(items))

    def _list_replies(self, match, params, body, request) -> httpx.Response:
        comment_id = match.group(1)
        if comment_id not in self.comments:
            return httpx.Response(404, json={"message": "comment not found"})
        items = [
            c
            for c in self.comments.values()
            if c["parentCommentId"] is not None
            and str(c["parentCommentId"]) == comment_id
        ]
        return httpx.Response(200, json=self._newest_first(items))

    def _create_comment(self, match, params, body, request) -> httpx.Response:
        comment_id = self.add_comment(
            str(body["forumPostId"]),
            author=body["userEmail"],
            content=body["content"],
            parent_id=body.get("parentCommentId"),
        )
        self.comments[comment_id]["_img"] = body.get("imgPath")
        return httpx.Response(200, json=self._public(self.comments[comment_id]))

    def _update_comment(self, match, params, body, request) -> httpx.Response:
        comment = self.comments.get(match.group(1))
        if comment is None:
            return httpx.Response(404)
        if comment["userEmail"] != body["userEmail"]:
            return httpx.Response(403)
        comment["content"] = body["content"]
        return httpx.Response(200, json=self._public(comment))

    def _delete_comment(self, match, params, body, request) -> httpx.Response:
        comment = self.comments.get(match.group(1))
        if comment is None:
            return httpx.Response(404)
        if comment["userEmail"] != params.get("userEmail"):
            return httpx.Response(403)
        del self.comments[match.group(1)]
        return httpx.Response(200, json={"message": "deleted"})

    def _summary(self, match, params, body, request) -> httpx.Response:
        rows = self.reactions.get((match.group(1).upper(), match.group(2)), {})
        email = params.get("userEmail")
        return httpx.Response(
            200,
            json={
                "likeCount": sum(1 for k in rows.values() if k == "LIKE"),
                "dislikeCount": sum(1 for k in rows.values() if k == "DISLIKE"),
                "userReaction": rows.get(email) if email else None,
            },
        )

    def _reaction_add(self, match, params, body, request) -> httpx.Response:
        self.set_reaction(
            body["targetType"],
            body["targetId"],
            body["userEmail"],
            body["reactionType"],
        )
        return httpx.Response(200, json={"result": True})

    def _reaction_delete(self, match, params, body, request) -> httpx.Response:
        rows = self.reactions.get((body["targetType"], body["targetId"]), {})
        rows.pop(body["userEmail"], None)
        return httpx.Response(200, json={"result": True})

    def _report_check(self, match, params, body, request) -> httpx.Response:
        key = (params["userEmail"], params["targetType"], params["targetId"])
        return httpx.Response(200, json=key in self.reports)

    def _report_create(self, match, params, body, request) -> httpx.Response:
        key = (params["userEmail"], body["targetType"], body["targetId"])
        if key in self.reports:
            return httpx.Response(
                400, json={"code": DUPLICATE_CODE, "message": "already reported"}
            )
        self.reports.add(key)
        self.report_bodies.append(body)
        return httpx.Response(200, json={"result": "created"})

    def _saved_check(self, match, params, body, request) -> httpx.Response:
        email = request.headers.get("User-Email")
        return httpx.Response(
            200, json={"result": email in self.saved.get(match.group(1), set())}
        )

    def _saved_count(self, match, params, body, request) -> httpx.Response:
        return httpx.Response(
            200, json={"result": len(self.saved.get(match.group(1), set()))}
        )

    def _save(self, match, params, body, request) -> httpx.Response:
        email = request.headers["User-Email"]
        self.saved.setdefault(str(body["postId"]), set()).add(email)
        return httpx.Response(200, json={"result": True})

    def _unsave(self, match, params, body, request) -> httpx.Response:
        email = request.headers["User-Email"]
        self.saved.get(match.group(1), set()).discard(email)
        return httpx.Response(200, json={"result": True})


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def settings() -> Settings:
    """Test settings, isolated from any local .env file."""
    return Settings(
        _env_file=None,
        environment="testing",
        report_success_dismiss_seconds=0.05,
        duplicate_report_error_code=DUPLICATE_CODE,
    )


@pytest.fixture
def server() -> FakeForumServer:
    return FakeForumServer()


@pytest.fixture
def viewer() -> Viewer:
    return Viewer(email="ana@example.com", username="ana")


@pytest.fixture
def session(viewer: Viewer) -> ViewerSession:
    return ViewerSession(viewer, token="tok-123456")


@pytest.fixture
def anonymous_session() -> ViewerSession:
    return ViewerSession()


@pytest.fixture
def login_prompts() -> list[str]:
    """Records every on_login_required callback."""
    return []


@pytest_asyncio.fixture
async def make_deps(
    settings: Settings, server: FakeForumServer, login_prompts: list[str]
) -> AsyncIterator[Callable[[ViewerSession], ForumDependencies]]:
    """Dependency factory on the fake server; clients close at teardown."""
    created: list[ForumDependencies] = []

    def factory(session: ViewerSession) -> ForumDependencies:
        deps = build_dependencies(
            settings,
            session,
            on_login_required=lambda: login_prompts.append("login"),
            transport=httpx.MockTransport(server.handler),
        )
        created.append(deps)
        return deps

    yield factory
    for deps in created:
        await deps.aclose()


@pytest.fixture
def deps(make_deps, session: ViewerSession) -> ForumDependencies:
    return make_deps(session)


@pytest.fixture
def post() -> Post:
    return Post(id="7", author_email="owner@example.com", author_username="owner")


@pytest.fixture
def counts() -> list[int]:
    """Records every on_count_change callback."""
    return []


@pytest.fixture
def tree(post: Post, deps: ForumDependencies, counts: list[int]) -> CommentTree:
    return CommentTree(post, deps, on_count_change=counts.append)
