"""Tests for the review lifecycle: creation, edits, deletion and read paths."""

from decimal import Decimal

import pytest

from reviewhub.db.models import Comment, Review, ReviewStatus, Vote
from reviewhub.errors import BadRequestError, ForbiddenError, NotFoundError
from reviewhub.services import comments, resolve_pagination, reviews, votes
from reviewhub.services.reviews import ReviewDraft, ReviewFilters, ReviewPatch
from tests.conftest import actor_for, make_admin, make_category, make_review, make_user


def _draft(category, **overrides):
    fields = dict(
        title="Standing desk",
        description="Sturdy frame, quiet motor.",
        rating=4,
        category_id=category.id,
    )
    fields.update(overrides)
    return ReviewDraft(**fields)


class TestCreateReview:
    def test_guest_review_starts_as_draft(self, session):
        user = make_user(session)
        category = make_category(session)
        review = reviews.create_review(
            session, actor_for(user), _draft(category), images=["a.jpg", "b.jpg"]
        )
        assert review.status == ReviewStatus.DRAFT
        assert review.images == ["a.jpg", "b.jpg"]
        assert review.premium_price is None

    def test_admin_review_is_published(self, session):
        admin = make_admin(session)
        review = reviews.create_review(session, actor_for(admin), _draft(make_category(session)))
        assert review.status == ReviewStatus.PUBLISHED

    @pytest.mark.parametrize("price", [None, 0, -5, "abc"])
    def test_premium_requires_positive_price(self, session, price):
        admin = make_admin(session)
        category = make_category(session)
        with pytest.raises(BadRequestError):
            reviews.create_review(
                session, actor_for(admin), _draft(category, is_premium=True, premium_price=price)
            )
        assert session.query(Review).count() == 0

    def test_premium_price_persisted(self, session):
        admin = make_admin(session)
        review = reviews.create_review(
            session,
            actor_for(admin),
            _draft(make_category(session), is_premium=True, premium_price="9.99"),
        )
        assert review.is_premium is True
        assert review.premium_price == Decimal("9.99")

    def test_price_dropped_for_regular_review(self, session):
        user = make_user(session)
        review = reviews.create_review(
            session, actor_for(user), _draft(make_category(session), premium_price=5)
        )
        assert review.premium_price is None

    def test_unknown_category(self, session):
        user = make_user(session)
        category = make_category(session)
        with pytest.raises(NotFoundError, match="Category"):
            reviews.create_review(session, actor_for(user), _draft(category, category_id=999))


class TestUpdateReview:
    def test_author_edit_of_published_resets_to_draft(self, session):
        user = make_user(session)
        review = make_review(session, user, make_category(session))

        updated = reviews.update_review(
            session, review.id, actor_for(user), ReviewPatch(title="Updated title")
        )

        assert updated.title == "Updated title"
        assert updated.status == ReviewStatus.DRAFT

    def test_author_edit_of_unpublished_keeps_status(self, session):
        user = make_user(session)
        review = make_review(
            session, user, make_category(session), status=ReviewStatus.UNPUBLISHED
        )
        updated = reviews.update_review(session, review.id, actor_for(user), ReviewPatch(rating=2))
        assert updated.status == ReviewStatus.UNPUBLISHED

    def test_admin_edit_keeps_status(self, session):
        user = make_user(session)
        admin = make_admin(session)
        review = make_review(session, user, make_category(session))

        updated = reviews.update_review(
            session, review.id, actor_for(admin), ReviewPatch(title="Typo fixed")
        )

        assert updated.status == ReviewStatus.PUBLISHED

    def test_admin_can_set_status(self, session):
        user = make_user(session)
        admin = make_admin(session)
        review = make_review(session, user, make_category(session), status=ReviewStatus.DRAFT)

        updated = reviews.update_review(
            session, review.id, actor_for(admin), ReviewPatch(status=ReviewStatus.PUBLISHED)
        )

        assert updated.status == ReviewStatus.PUBLISHED

    def test_admin_cannot_request_draft(self, session):
        admin = make_admin(session)
        review = make_review(session, admin, make_category(session))
        with pytest.raises(BadRequestError):
            reviews.update_review(
                session, review.id, actor_for(admin), ReviewPatch(status=ReviewStatus.DRAFT)
            )

    def test_non_admin_premium_fields_ignored(self, session):
        user = make_user(session)
        review = make_review(session, user, make_category(session), status=ReviewStatus.DRAFT)

        updated = reviews.update_review(
            session,
            review.id,
            actor_for(user),
            ReviewPatch(is_premium=True, premium_price=Decimal("3.00")),
        )

        assert updated.is_premium is False
        assert updated.premium_price is None

    def test_admin_premium_patch_validated(self, session):
        user = make_user(session)
        admin = make_admin(session)
        review = make_review(session, user, make_category(session))
        with pytest.raises(BadRequestError, match="premium price"):
            reviews.update_review(
                session, review.id, actor_for(admin), ReviewPatch(is_premium=True)
            )

    def test_admin_turns_premium_off_clears_price(self, session):
        admin = make_admin(session)
        review = make_review(
            session,
            admin,
            make_category(session),
            is_premium=True,
            premium_price=Decimal("4.50"),
        )
        updated = reviews.update_review(
            session, review.id, actor_for(admin), ReviewPatch(is_premium=False)
        )
        assert updated.is_premium is False
        assert updated.premium_price is None

    def test_images_are_appended(self, session):
        user = make_user(session)
        review = make_review(
            session, user, make_category(session), images=["one.jpg"], status=ReviewStatus.DRAFT
        )
        updated = reviews.update_review(
            session, review.id, actor_for(user), ReviewPatch(), new_images=["two.jpg"]
        )
        assert updated.images == ["one.jpg", "two.jpg"]

    def test_stranger_forbidden(self, session):
        owner = make_user(session)
        stranger = make_user(session, email="x@example.com", name="X")
        review = make_review(session, owner, make_category(session))
        with pytest.raises(ForbiddenError):
            reviews.update_review(session, review.id, actor_for(stranger), ReviewPatch(rating=1))


class TestDeleteReview:
    def _engaged_review(self, session):
        owner = make_user(session)
        reader = make_user(session, email="reader@example.com", name="Reader")
        review = make_review(session, owner, make_category(session))
        votes.cast_vote(session, review.id, reader.id, "upvote")
        top = comments.add_comment(session, review.id, reader.id, "Q")
        comments.add_comment(session, review.id, owner.id, "A", parent_id=top.id)
        return review, owner, reader

    def test_stranger_forbidden_and_nothing_removed(self, session):
        review, _, reader = self._engaged_review(session)
        with pytest.raises(ForbiddenError):
            reviews.delete_review(session, review.id, actor_for(reader))
        assert session.get(Review, review.id) is not None
        assert session.query(Vote).count() == 1
        assert session.query(Comment).count() == 2

    def test_owner_delete_cascades(self, session):
        review, owner, _ = self._engaged_review(session)
        review_id = review.id

        result = reviews.delete_review(session, review_id, actor_for(owner))

        assert result.votes_removed == 1
        assert result.comments_removed == 2
        assert session.get(Review, review_id) is None
        assert session.query(Vote).count() == 0
        assert session.query(Comment).count() == 0

    def test_admin_may_delete(self, session):
        review, _, _ = self._engaged_review(session)
        admin = make_admin(session)
        reviews.delete_review(session, review.id, actor_for(admin))
        assert session.query(Review).count() == 0

    def test_missing_review(self, session):
        user = make_user(session)
        with pytest.raises(NotFoundError):
            reviews.delete_review(session, 42, actor_for(user))


class TestRemoveImage:
    def test_removes_first_occurrence(self, session):
        user = make_user(session)
        review = make_review(
            session, user, make_category(session), images=["a.jpg", "b.jpg", "a.jpg"]
        )
        updated = reviews.remove_image(session, review.id, actor_for(user), "a.jpg")
        assert updated.images == ["b.jpg", "a.jpg"]

    def test_absent_url_is_noop(self, session):
        user = make_user(session)
        review = make_review(session, user, make_category(session), images=["a.jpg"])
        updated = reviews.remove_image(session, review.id, actor_for(user), "zzz.jpg")
        assert updated.images == ["a.jpg"]


class TestReviewReads:
    def test_public_listing_only_published(self, session):
        user = make_user(session)
        category = make_category(session)
        published = make_review(session, user, category, title="Visible")
        make_review(session, user, category, title="Hidden", status=ReviewStatus.DRAFT)

        page = reviews.get_all_reviews(
            session, ReviewFilters(status=ReviewStatus.DRAFT), resolve_pagination()
        )

        assert [s.review.id for s in page.data] == [published.id]
        assert page.meta.total == 1

    def test_admin_listing_can_filter_drafts(self, session):
        admin = make_admin(session)
        user = make_user(session)
        category = make_category(session)
        make_review(session, user, category, title="Visible")
        draft = make_review(session, user, category, title="Hidden", status=ReviewStatus.DRAFT)

        page = reviews.get_all_reviews(
            session,
            ReviewFilters(status=ReviewStatus.DRAFT),
            resolve_pagination(),
            viewer=actor_for(admin),
        )

        assert [s.review.id for s in page.data] == [draft.id]

    def test_title_filter_is_case_insensitive(self, session):
        user = make_user(session)
        category = make_category(session)
        match = make_review(session, user, category, title="Great Blender")
        make_review(session, user, category, title="Toaster")

        page = reviews.get_all_reviews(
            session, ReviewFilters(title="blend"), resolve_pagination()
        )

        assert [s.review.id for s in page.data] == [match.id]

    def test_sort_by_rating_and_second_page(self, session):
        user = make_user(session)
        category = make_category(session)
        for rating in [3, 5, 1, 4, 2, 5, 4]:
            make_review(session, user, category, title=f"R{rating}", rating=rating)

        page = reviews.get_all_reviews(
            session,
            ReviewFilters(),
            resolve_pagination(page=2, limit=5, sort_by="rating", sort_order="asc"),
        )

        assert page.meta.total == 7
        assert [s.review.rating for s in page.data] == [5, 5]

    def test_unknown_sort_field_rejected(self, session):
        with pytest.raises(BadRequestError, match="sort"):
            reviews.get_all_reviews(
                session, ReviewFilters(), resolve_pagination(sort_by="password_hash")
            )

    def test_premium_preview_truncated_in_listing(self, session):
        admin = make_admin(session)
        review = make_review(
            session,
            admin,
            make_category(session),
            description="x" * 150,
            is_premium=True,
            premium_price=Decimal("2.00"),
        )

        summary = reviews.get_all_reviews(session, ReviewFilters(), resolve_pagination()).data[0]
        detail = reviews.get_review_by_id(session, review.id)

        assert summary.description_preview == "x" * 100 + "..."
        assert detail.review.description == "x" * 150

    def test_listing_counts(self, session):
        user = make_user(session)
        reader = make_user(session, email="r@example.com", name="R")
        review = make_review(session, user, make_category(session))
        votes.cast_vote(session, review.id, reader.id, "upvote")
        comments.add_comment(session, review.id, reader.id, "Nice")

        summary = reviews.get_all_reviews(session, ReviewFilters(), resolve_pagination()).data[0]

        assert summary.upvotes == 1
        assert summary.comment_count == 1

    def test_detail_hidden_for_strangers(self, session):
        owner = make_user(session)
        stranger = make_user(session, email="s@example.com", name="S")
        review = make_review(session, owner, make_category(session), status=ReviewStatus.DRAFT)

        with pytest.raises(NotFoundError):
            reviews.get_review_by_id(session, review.id, viewer=actor_for(stranger))
        with pytest.raises(NotFoundError):
            reviews.get_review_by_id(session, review.id)

        assert reviews.get_review_by_id(session, review.id, viewer=actor_for(owner)).review.id == review.id

    def test_detail_includes_votes_and_threads(self, session):
        owner = make_user(session)
        reader = make_user(session, email="r@example.com", name="R")
        review = make_review(session, owner, make_category(session))
        votes.cast_vote(session, review.id, reader.id, "downvote")
        top = comments.add_comment(session, review.id, reader.id, "Q")
        comments.add_comment(session, review.id, owner.id, "A", parent_id=top.id)

        detail = reviews.get_review_by_id(session, review.id, viewer=actor_for(reader))

        assert detail.votes.downvotes == 1
        assert detail.viewer_vote is not None
        assert len(detail.comments) == 1
        assert detail.comments[0].reply_count == 1

    def test_featured(self, session):
        user = make_user(session)
        voter = make_user(session, email="v@example.com", name="V")
        category = make_category(session)
        low = make_review(session, user, category, title="Low", rating=1)
        make_review(session, user, category, title="Top", rating=5)
        make_review(session, user, category, title="Draft", rating=5, status=ReviewStatus.DRAFT)
        votes.cast_vote(session, low.id, voter.id, "upvote")

        featured = reviews.get_featured_reviews(session, limit=2)

        assert [s.review.title for s in featured.highest_rated] == ["Top"]
        assert [s.review.title for s in featured.most_voted] == ["Low"]

    def test_related_same_category_published_only(self, session):
        user = make_user(session)
        audio = make_category(session, "Audio")
        kitchen = make_category(session, "Kitchen")
        base = make_review(session, user, audio, title="Base")
        sibling = make_review(session, user, audio, title="Sibling")
        make_review(session, user, audio, title="Draft", status=ReviewStatus.DRAFT)
        make_review(session, user, kitchen, title="Elsewhere")

        related = reviews.get_related_reviews(session, base.id)

        assert [s.review.id for s in related] == [sibling.id]

    def test_user_reviews_include_all_statuses(self, session):
        user = make_user(session)
        category = make_category(session)
        make_review(session, user, category, title="P")
        make_review(
            session, user, category, title="U", status=ReviewStatus.UNPUBLISHED,
            moderation_note="Needs photos",
        )

        page = reviews.get_user_reviews(session, user.id, resolve_pagination())

        assert page.meta.total == 2
        assert page.data[0].review.moderation_note == "Needs photos"
