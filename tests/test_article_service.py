"""Tests for the article workflow engine."""

import pytest

from mwmgr.models import ArticleStatus, ErrorKind, NotificationType

CATEGORY = "Cultura"


@pytest.fixture
def articles(engine, clock):
    """Article service on the engine's store, driven by the fake clock"""
    from mwmgr.services.article_service import ArticleService

    return ArticleService(engine.storage, engine.notification_service, clock=clock)


async def _draft(articles, author, title="Gita a Roma"):
    result = await articles.create_article(author, title, "Resoconto della gita.", CATEGORY, tags=[" viaggi ", "", "viaggi", "scuola"])
    assert result.success, result.error
    return result.data


async def _types(engine, user):
    return [n.type for n in await engine.notification_service.list_notifications(user.id)]


class TestDrafting:
    """Test creation and editing."""

    @pytest.mark.asyncio
    async def test_create_draft(self, articles, writer, clock) -> None:
        article = await _draft(articles, writer)

        assert article.status == ArticleStatus.DRAFT
        assert article.author_id == writer.id
        assert article.author_name == "Writer Test"
        assert article.tags == ["viaggi", "scuola"]
        assert article.created_at == article.updated_at == clock.now
        assert article.published_at is None

    @pytest.mark.asyncio
    async def test_reviewer_cannot_create(self, articles, reviewer) -> None:
        result = await articles.create_article(reviewer, "T", "B", CATEGORY)
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_validation(self, articles, writer) -> None:
        assert (await articles.create_article(writer, " ", "B", CATEGORY)).error == "Title and body are required"
        assert (await articles.create_article(writer, "T", "B", "Gossip")).kind == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_only_author_or_admin_edits(self, articles, writer, alice, admin) -> None:
        article = await _draft(articles, writer)

        assert (await articles.update_article(alice, article.id, {"title": "X"})).kind == ErrorKind.PERMISSION_DENIED
        assert (await articles.update_article(admin, article.id, {"title": "Admin edit"})).success
        assert (await articles.get_article(article.id)).title == "Admin edit"

    @pytest.mark.asyncio
    async def test_updated_at_strictly_increases(self, articles, writer) -> None:
        article = await _draft(articles, writer)
        first = article.updated_at

        # Clock does not move between the two edits
        one = (await articles.update_article(writer, article.id, {"body": "v2"})).data
        two = (await articles.update_article(writer, article.id, {"body": "v3"})).data

        assert first < one.updated_at < two.updated_at

    @pytest.mark.asyncio
    async def test_edit_after_rejection_returns_to_draft(self, articles, writer, reviewer) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)
        await articles.reject(reviewer, article.id, "Troppo lungo")

        result = await articles.update_article(writer, article.id, {"body": "Più breve."})

        assert result.success
        assert result.data.status == ArticleStatus.DRAFT

    @pytest.mark.asyncio
    async def test_published_is_read_only(self, articles, writer, reviewer, admin) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)
        await articles.approve(reviewer, article.id)
        await articles.publish(admin, article.id)

        result = await articles.update_article(admin, article.id, {"title": "Late"})
        assert result.kind == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_delete_admin_only(self, articles, writer, admin) -> None:
        article = await _draft(articles, writer)

        assert (await articles.delete_article(writer, article.id)).kind == ErrorKind.PERMISSION_DENIED
        assert (await articles.delete_article(admin, article.id)).success
        assert await articles.get_article(article.id) is None


class TestWorkflow:
    """Test the review state machine."""

    @pytest.mark.asyncio
    async def test_full_workflow(self, engine, articles, writer, reviewer, admin, clock) -> None:
        article = await _draft(articles, writer)

        clock.advance(minutes=1)
        assert (await articles.submit_for_review(writer, article.id)).data.status == ArticleStatus.IN_REVIEW

        clock.advance(minutes=1)
        approved = (await articles.approve(reviewer, article.id, "Ottimo lavoro")).data
        assert approved.status == ArticleStatus.APPROVED
        assert approved.published_at is None
        assert approved.comments[-1].text == "Ottimo lavoro"

        clock.advance(minutes=1)
        published = (await articles.publish(admin, article.id)).data
        assert published.status == ArticleStatus.PUBLISHED
        assert published.published_at == clock.now
        assert published.updated_at == clock.now

        assert sorted(await _types(engine, writer)) == sorted([
            NotificationType.ARTICLE_COMMENT,
            NotificationType.ARTICLE_APPROVED,
            NotificationType.ARTICLE_PUBLISHED,
        ])

    @pytest.mark.asyncio
    async def test_draft_cannot_be_published(self, articles, writer, admin) -> None:
        article = await _draft(articles, writer)

        result = await articles.publish(admin, article.id)

        assert result.kind == ErrorKind.VALIDATION
        assert (await articles.get_article(article.id)).status == ArticleStatus.DRAFT

    @pytest.mark.asyncio
    async def test_writer_cannot_approve(self, articles, writer, alice) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)

        result = await articles.approve(alice, article.id)
        assert result.kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_other_writer_cannot_submit(self, articles, writer, alice) -> None:
        article = await _draft(articles, writer)
        assert (await articles.submit_for_review(alice, article.id)).kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_reviewer_cannot_publish(self, articles, writer, reviewer) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)
        await articles.approve(reviewer, article.id)

        assert (await articles.publish(reviewer, article.id)).kind == ErrorKind.PERMISSION_DENIED

    @pytest.mark.asyncio
    async def test_republish_keeps_published_at(self, articles, writer, reviewer, admin, clock) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)
        await articles.approve(reviewer, article.id)
        first = (await articles.publish(admin, article.id)).data.published_at

        clock.advance(hours=1)
        again = await articles.publish(admin, article.id)

        assert again.success
        assert again.data.published_at == first

    @pytest.mark.asyncio
    async def test_rejection_notifies_with_reason(self, engine, articles, writer, reviewer) -> None:
        article = await _draft(articles, writer)
        await articles.submit_for_review(writer, article.id)
        await articles.reject(reviewer, article.id, "Fonti mancanti")

        notifications = await engine.notification_service.list_notifications(writer.id)
        rejected = [n for n in notifications if n.type == NotificationType.ARTICLE_REJECTED]
        assert len(rejected) == 1
        assert rejected[0].message.endswith(": Fonti mancanti")
        assert rejected[0].data["article_id"] == str(article.id)

    @pytest.mark.asyncio
    async def test_admin_acting_on_own_article_is_not_notified(self, engine, articles, admin) -> None:
        article = await _draft(articles, admin)
        await articles.submit_for_review(admin, article.id)
        await articles.approve(admin, article.id, "self")
        await articles.publish(admin, article.id)

        assert await _types(engine, admin) == []


class TestComments:
    """Test review comments."""

    @pytest.mark.asyncio
    async def test_comment_notifies_author(self, engine, articles, writer, reviewer) -> None:
        article = await _draft(articles, writer)

        result = await articles.add_comment(reviewer, article.id, "Manca il titolo del paragrafo")

        assert result.success
        assert result.data.author_role.value == "reviewer"
        assert await _types(engine, writer) == [NotificationType.ARTICLE_COMMENT]
        assert (await articles.get_article(article.id)).updated_at > article.updated_at

    @pytest.mark.asyncio
    async def test_own_comment_is_silent(self, engine, articles, writer) -> None:
        article = await _draft(articles, writer)
        await articles.add_comment(writer, article.id, "Nota per me")
        assert await _types(engine, writer) == []

    @pytest.mark.asyncio
    async def test_empty_comment(self, articles, writer) -> None:
        article = await _draft(articles, writer)
        assert (await articles.add_comment(writer, article.id, "  ")).kind == ErrorKind.VALIDATION


class TestQueries:
    """Test listings and counters."""

    @pytest.mark.asyncio
    async def test_lists_and_counts(self, articles, writer, alice, clock) -> None:
        first = await _draft(articles, writer, "Primo")
        clock.advance(minutes=1)
        second = await _draft(articles, alice, "Secondo")
        await articles.submit_for_review(alice, second.id)

        assert [a.id for a in await articles.list_articles()] == [second.id, first.id]
        assert [a.id for a in await articles.list_by_author(writer.id)] == [first.id]
        assert [a.id for a in await articles.list_by_status(ArticleStatus.IN_REVIEW)] == [second.id]

        counts = await articles.status_counts()
        assert counts["DRAFT"] == 1
        assert counts["IN_REVIEW"] == 1
        assert counts["PUBLISHED"] == 0
