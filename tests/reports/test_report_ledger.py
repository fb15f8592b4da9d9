"""Tests for the shared report ledger."""

import pytest

from tripforum.auth.identity import Viewer
from tripforum.core.targets import Target, TargetType


class TestMarkReported:
    """Tests for mark_reported / is_reported."""

    def test_mark_then_is_reported(self, deps):
        ledger = deps.ledger
        assert ledger.is_reported("101") is False

        ledger.mark_reported("101")

        assert ledger.is_reported("101") is True
        assert ledger.is_reported("101", TargetType.POST) is False

    def test_mark_is_idempotent_and_notifies_once(self, deps):
        """Listeners fire once per newly reported target."""
        seen: list[Target] = []
        deps.ledger.subscribe(seen.append)

        deps.ledger.mark_reported("101")
        deps.ledger.mark_reported("101")

        assert seen == [Target(TargetType.COMMENT, "101")]

    def test_unsubscribe(self, deps):
        seen: list[Target] = []
        unsubscribe = deps.ledger.subscribe(seen.append)
        unsubscribe()

        deps.ledger.mark_reported("101")

        assert seen == []

    def test_anonymous_viewer_never_reported(self, make_deps, anonymous_session):
        ledger = make_deps(anonymous_session).ledger

        ledger.mark_reported("101")

        assert ledger.is_reported("101") is False

    def test_entries_are_per_viewer(self, deps, session):
        """Another viewer on the same session starts with a clean slate."""
        deps.ledger.mark_reported("101")

        session.login(Viewer(email="bob@example.com", username="bob"), "t")
        assert deps.ledger.is_reported("101") is False

        session.login(Viewer(email="ANA@example.com", username="ana"), "t")
        assert deps.ledger.is_reported("101") is True

    def test_logout_hides_reports_until_the_same_viewer_returns(
        self, deps, session, viewer
    ):
        """Nobody is logged in after logout, so nothing counts as reported."""
        deps.ledger.mark_reported("101")

        session.logout()
        assert deps.ledger.is_reported("101") is False

        session.login(viewer, "tok-2")
        assert deps.ledger.is_reported("101") is True


class TestCheckMany:
    """Tests for priming the ledger from the server."""

    @pytest.mark.asyncio
    async def test_check_many_marks_server_reports(self, deps, server):
        server.reports.add(("ana@example.com", "COMMENT", "102"))

        reported = await deps.ledger.check_many(["101", "102", "103"])

        assert reported == {"102"}
        assert deps.ledger.is_reported("102") is True
        assert deps.ledger.is_reported("101") is False
        assert server.count_calls("GET", r"/api/reports/check") == 3

    @pytest.mark.asyncio
    async def test_known_ids_are_not_rechecked(self, deps, server):
        deps.ledger.mark_reported("101")

        reported = await deps.ledger.check_many(["101", "102", "102"])

        assert reported == {"101"}
        assert server.count_calls("GET", r"/api/reports/check") == 1

    @pytest.mark.asyncio
    async def test_reported_never_reverts(self, deps, server):
        """Once reported, a later check answering false changes nothing."""
        deps.ledger.mark_reported("101")
        server.reports.clear()

        await deps.ledger.check_many(["101"])
        deps.ledger.mark_reported("101")

        assert deps.ledger.is_reported("101") is True

    @pytest.mark.asyncio
    async def test_failed_check_counts_as_not_reported(self, deps, server):
        server.reports.add(("ana@example.com", "COMMENT", "101"))
        server.fail("GET", r"/api/reports/check", status=503)

        reported = await deps.ledger.check_many(["101"])

        assert reported == set()
        assert deps.ledger.is_reported("101") is False

    @pytest.mark.asyncio
    async def test_undecodable_check_counts_as_not_reported(self, deps, server):
        """An HTML page served with 200 is treated like a failed check."""
        server.fail(
            "GET", r"/api/reports/check", status=200, text="<html>busy</html>"
        )

        reported = await deps.ledger.check_many(["101", "102"])

        assert reported == set()
        assert server.count_calls("GET", r"/api/reports/check") == 2

    @pytest.mark.asyncio
    async def test_anonymous_check_makes_no_calls(
        self, make_deps, anonymous_session, server
    ):
        ledger = make_deps(anonymous_session).ledger

        assert await ledger.check_many(["101"]) == set()
        assert server.calls == []

    @pytest.mark.asyncio
    async def test_check_many_for_posts(self, deps, server):
        server.reports.add(("ana@example.com", "POST", "7"))

        reported = await deps.ledger.check_many(["7"], TargetType.POST)

        assert reported == {"7"}
        assert deps.ledger.is_reported("7", TargetType.POST) is True
        assert deps.ledger.is_reported("7", TargetType.COMMENT) is False
