"""Tests for a single comment node.

Covers:
- Edit lifecycle (begin, save, cancel) with pessimistic apply
- Two-step delete
- Lazy replies: first expansion fetches, later toggles do not
- Reply placement: replies to replies attach to the top-level comment
"""

import pytest
import pytest_asyncio

from tripforum.comments.models import (
    NOT_LOADED,
    DeleteState,
    EditState,
    Loaded,
    Reply,
)
from tripforum.core.result import Err, Ok


@pytest_asyncio.fixture
async def thread(tree, server, post):
    """Load a tree with one own comment (two replies) and one foreign comment.

    Returns:
        (own_node, foreign_node)
    """
    own = server.add_comment(post.id, author="ana@example.com", content="mine")
    server.add_comment(post.id, parent_id=own, content="first reply")
    server.add_comment(post.id, author="ana@example.com", parent_id=own)
    foreign = server.add_comment(post.id, author="bob@example.com")
    await tree.load()
    return tree.find(own), tree.find(foreign)


class TestEdit:
    """Tests for the edit lifecycle."""

    @pytest.mark.asyncio
    async def test_save_applies_confirmed_content(self, thread, server):
        own, _ = thread

        assert own.begin_edit() is True
        assert own.edit_draft == "mine"
        own.update_edit_draft("  edited text ")
        assert own.display_content == "  edited text "

        result = await own.save_edit()

        assert isinstance(result, Ok)
        assert own.content == "edited text"
        assert own.edit_state is EditState.VIEWING
        assert own.edit_draft is None
        assert server.comments[own.id]["content"] == "edited text"

    @pytest.mark.asyncio
    async def test_save_failure_stays_in_edit_mode(self, thread, server):
        own, _ = thread
        own.begin_edit()
        own.update_edit_draft("new words")
        server.fail("PUT", r"/api/comments/", status=500)

        result = await own.save_edit()

        assert isinstance(result, Err)
        assert own.content == "mine"
        assert own.edit_state is EditState.EDITING
        assert own.edit_draft == "new words"
        assert own.saving is False

    @pytest.mark.asyncio
    async def test_blank_edit_is_rejected_locally(self, thread, server):
        own, _ = thread
        own.begin_edit()
        own.update_edit_draft("   ")
        calls_before = len(server.calls)

        result = await own.save_edit()

        assert isinstance(result, Err)
        assert result.code == "validation_error"
        assert len(server.calls) == calls_before

    @pytest.mark.asyncio
    async def test_cancel_restores_view(self, thread):
        own, _ = thread
        own.begin_edit()
        own.update_edit_draft("throwaway")

        own.cancel_edit()

        assert own.edit_state is EditState.VIEWING
        assert own.display_content == "mine"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_edit(self, thread):
        _, foreign = thread

        assert foreign.begin_edit() is False
        assert isinstance(await foreign.save_edit(), Err)

    @pytest.mark.asyncio
    async def test_server_forbidden_keeps_content(self, thread, server):
        own, _ = thread
        own.begin_edit()
        own.update_edit_draft("sneaky")
        server.fail("PUT", r"/api/comments/", status=403)

        result = await own.save_edit()

        assert isinstance(result, Err)
        assert result.error.status_code == 403
        assert own.content == "mine"


class TestDelete:
    """Tests for the two-step delete."""

    @pytest.mark.asyncio
    async def test_confirm_removes_node_and_counts_down(
        self, thread, tree, server, post
    ):
        own, foreign = thread
        total = post.comment_count

        assert own.request_delete() is True
        assert own.delete_state is DeleteState.CONFIRMING
        result = await own.confirm_delete()

        assert isinstance(result, Ok)
        assert tree.nodes == [foreign]
        assert own.id not in server.comments
        assert post.comment_count == total - 1
        assert own.mounted is False
        assert own.reaction.closed is True

    @pytest.mark.asyncio
    async def test_cancel_returns_to_idle(self, thread, server):
        own, _ = thread
        own.request_delete()

        own.cancel_delete()

        assert own.delete_state is DeleteState.IDLE
        assert isinstance(await own.confirm_delete(), Err)
        assert own.id in server.comments

    @pytest.mark.asyncio
    async def test_confirm_without_request_is_invalid(self, thread):
        own, _ = thread

        result = await own.confirm_delete()

        assert isinstance(result, Err)
        assert result.code == "invalid_state"

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_node(self, thread, tree, server, post):
        own, _ = thread
        total = post.comment_count
        own.request_delete()
        server.fail("DELETE", r"/api/comments/", status=500)

        result = await own.confirm_delete()

        assert isinstance(result, Err)
        assert own in tree.nodes
        assert own.delete_state is DeleteState.IDLE
        assert post.comment_count == total

    @pytest.mark.asyncio
    async def test_non_owner_cannot_request_delete(self, thread):
        _, foreign = thread

        assert foreign.request_delete() is False
        assert foreign.delete_state is DeleteState.IDLE


class TestReplies:
    """Tests for lazily loaded replies."""

    @pytest.mark.asyncio
    async def test_first_expand_fetches_later_toggles_do_not(self, thread, server):
        own, _ = thread
        assert own.replies is NOT_LOADED
        assert own.visible_replies == []

        assert await own.toggle_replies() == Ok(True)
        assert isinstance(own.replies, Loaded)
        assert [r.content for r in own.visible_replies][-1] == "first reply"

        assert await own.toggle_replies() == Ok(False)
        assert own.visible_replies == []
        assert await own.toggle_replies() == Ok(True)

        assert server.count_calls("GET", r"/replies$") == 1

    @pytest.mark.asyncio
    async def test_replies_of_deleted_parent_are_empty(self, thread, server):
        """A 404 on the reply list means the thread is gone: show nothing."""
        _, foreign = thread
        del server.comments[foreign.id]

        result = await foreign.load_replies()

        assert result == Ok([])
        assert isinstance(foreign.replies, Loaded)
        assert foreign.replies.nodes == []

    @pytest.mark.asyncio
    async def test_reply_fetch_error_leaves_not_loaded(self, thread, server):
        own, _ = thread
        server.fail("GET", r"/replies$", status=500)

        result = await own.toggle_replies()

        assert isinstance(result, Err)
        assert own.replies is NOT_LOADED

    @pytest.mark.asyncio
    async def test_loaded_replies_are_primed(self, thread, server):
        own, _ = thread
        reply_ids = [
            cid
            for cid, c in server.comments.items()
            if c["parentCommentId"] == int(own.id)
        ]
        server.reports.add(("ana@example.com", "COMMENT", reply_ids[0]))
        server.set_reaction("COMMENT", reply_ids[1], "bob@example.com", "DISLIKE")

        await own.load_replies()

        by_id = {r.id: r for r in own.replies.nodes}
        assert by_id[reply_ids[0]].report_status == "reported"
        assert by_id[reply_ids[1]].reaction.state.dislike_count == 1

    @pytest.mark.asyncio
    async def test_reply_nodes_know_their_parent(self, thread):
        own, _ = thread

        await own.load_replies()

        for reply in own.replies.nodes:
            assert reply.placement == Reply(own.id)
            assert reply.is_reply is True
            assert reply.thread_root is own

    @pytest.mark.asyncio
    async def test_undecodable_reply_list_leaves_not_loaded(self, thread, server):
        own, _ = thread
        server.fail("GET", r"/replies$", status=200, text="<html>oops</html>")

        result = await own.toggle_replies()

        assert isinstance(result, Err)
        assert result.code == "api_error"
        assert own.replies is NOT_LOADED


class TestCreateReply:
    """Tests for posting replies."""

    @pytest.mark.asyncio
    async def test_reply_loads_thread_then_prepends(self, thread, server, post):
        own, _ = thread
        total = post.comment_count
        own.reply_draft = "thanks!"

        result = await own.create_reply()

        assert isinstance(result, Ok)
        assert isinstance(own.replies, Loaded)
        assert own.replies.nodes[0] is result.value
        assert len(own.replies) == 3
        assert own.replies_visible is True
        assert own.reply_draft == ""
        assert post.comment_count == total + 1

    @pytest.mark.asyncio
    async def test_reply_to_reply_attaches_to_top_level(self, thread, server):
        own, _ = thread
        await own.load_replies()
        nested_target = own.replies.nodes[-1]

        result = await nested_target.create_reply("agreed")

        assert isinstance(result, Ok)
        reply = result.value
        assert reply.placement == Reply(own.id)
        assert reply.parent is own
        assert own.replies.nodes[0] is reply
        assert server.comments[reply.id]["parentCommentId"] == int(own.id)

    @pytest.mark.asyncio
    async def test_reply_failure_keeps_draft(self, thread, server, post):
        own, _ = thread
        await own.load_replies()
        total = post.comment_count
        own.reply_draft = "keep me"
        server.fail("POST", r"^/api/comments$", status=500)

        result = await own.create_reply()

        assert isinstance(result, Err)
        assert own.reply_draft == "keep me"
        assert len(own.replies) == 2
        assert post.comment_count == total

    @pytest.mark.asyncio
    async def test_reply_confirmed_after_unmount_is_discarded(
        self, thread, server, post
    ):
        own, _ = thread
        await own.load_replies()
        before = list(own.replies.nodes)
        total = post.comment_count
        own.reply_draft = "late reply"
        own.unmount()

        result = await own.create_reply()

        assert isinstance(result, Ok)
        assert result.value.id in server.comments
        assert own.replies.nodes == before
        assert own.reply_draft == "late reply"
        assert post.comment_count == total

    @pytest.mark.asyncio
    async def test_deleting_a_reply_only_touches_its_thread(
        self, thread, tree, post
    ):
        own, foreign = thread
        await own.load_replies()
        mine = next(r for r in own.replies.nodes if r.author_email == own.author_email)
        total = post.comment_count

        mine.request_delete()
        result = await mine.confirm_delete()

        assert isinstance(result, Ok)
        assert mine not in own.replies.nodes
        assert len(own.replies) == 1
        assert tree.nodes == [foreign, own]
        assert post.comment_count == total - 1
