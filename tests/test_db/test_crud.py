"""Tests for the CRUD helpers in reviewhub.db.crud."""

import pytest

from reviewhub.db.crud import (
    CategoryCRUD,
    CommentCRUD,
    ProfileCRUD,
    ReviewCRUD,
    UserCRUD,
    VoteCRUD,
)
from reviewhub.db.models import AdminProfile, GuestProfile, Review, UserRole, VoteType
from reviewhub.errors import BadRequestError, ConflictError
from tests.conftest import make_admin, make_category, make_review, make_user


class TestUserCRUD:
    def test_create_minimal(self, session):
        user = UserCRUD.create(session, email="bob@example.com", name="Bob", password_hash="pw")
        assert user.id is not None
        assert user.role == UserRole.GUEST
        assert user.has_subscription is False

    def test_create_duplicate_email_raises(self, session):
        UserCRUD.create(session, email="dup@example.com", name="A", password_hash="pw")
        with pytest.raises(ConflictError, match="email"):
            UserCRUD.create(session, email="DUP@example.com", name="B", password_hash="pw")

    def test_create_empty_name_raises(self, session):
        with pytest.raises(BadRequestError, match="name"):
            UserCRUD.create(session, email="x@example.com", name="  ", password_hash="pw")

    def test_get_by_email_is_case_insensitive(self, session):
        make_user(session, email="find@example.com")
        assert UserCRUD.get_by_email(session, "Find@Example.com") is not None

    def test_update_email_uniqueness(self, session):
        make_user(session, email="a@example.com")
        other = make_user(session, email="b@example.com", name="B")
        with pytest.raises(ConflictError):
            UserCRUD.update(session, other.id, email="a@example.com")


class TestProfileCRUD:
    def test_guest_profile_variant(self, session):
        user = make_user(session)
        profile = ProfileCRUD.get_by_user_id(session, user.id)
        assert isinstance(profile, GuestProfile)
        assert profile.kind == "GUEST"

    def test_admin_profile_variant(self, session):
        admin = make_admin(session, contact_number="+1-555-0100")
        session.expire_all()
        profile = ProfileCRUD.get_by_user_id(session, admin.id)
        assert isinstance(profile, AdminProfile)
        assert profile.contact_number == "+1-555-0100"


class TestCategoryCRUD:
    def test_get_by_name_ci(self, session):
        category = CategoryCRUD.create(session, "Gaming")
        assert CategoryCRUD.get_by_name_ci(session, "gaming").id == category.id
        assert CategoryCRUD.get_by_name_ci(session, "GAMING", exclude_id=category.id) is None


class TestReviewCRUD:
    def test_create_defaults(self, session):
        user = make_user(session)
        category = make_category(session)
        review = ReviewCRUD.create(
            session,
            user_id=user.id,
            category_id=category.id,
            title="Kettle",
            description="Boils fast.",
            rating=5,
        )
        assert review.images == []
        assert review.is_premium is False
        assert review.premium_price is None

    def test_create_invalid_rating_raises(self, session):
        user = make_user(session)
        category = make_category(session)
        with pytest.raises(BadRequestError, match="rating"):
            make_review(session, user, category, rating=7)

    def test_update_empty_title_raises(self, session):
        user = make_user(session)
        review = make_review(session, user, make_category(session))
        with pytest.raises(BadRequestError, match="title"):
            ReviewCRUD.update(session, review.id, title="")

    def test_delete_cascade_counts(self, session):
        author = make_user(session)
        voter = make_user(session, email="voter@example.com", name="Voter")
        review = make_review(session, author, make_category(session))
        VoteCRUD.create(session, review.id, voter.id, VoteType.UPVOTE)
        top = CommentCRUD.create(session, review.id, voter.id, "Nice")
        CommentCRUD.create(session, review.id, author.id, "Thanks", parent_id=top.id)

        removed = ReviewCRUD.delete_cascade(session, review.id)

        assert removed == {"votes": 1, "comments": 2, "reviews": 1}
        assert session.get(Review, review.id) is None


class TestVoteAndCommentCounts:
    def test_count_by_type_groups(self, session):
        author = make_user(session)
        review = make_review(session, author, make_category(session))
        for i, vote_type in enumerate([VoteType.UPVOTE, VoteType.UPVOTE, VoteType.DOWNVOTE]):
            voter = make_user(session, email=f"v{i}@example.com", name=f"V{i}")
            VoteCRUD.create(session, review.id, voter.id, vote_type)

        counts = VoteCRUD.count_by_type(session, [review.id])

        assert counts[review.id] == {VoteType.UPVOTE: 2, VoteType.DOWNVOTE: 1}

    def test_count_by_type_empty_ids(self, session):
        assert VoteCRUD.count_by_type(session, []) == {}

    def test_comment_counts_default_to_zero(self, session):
        author = make_user(session)
        category = make_category(session)
        first = make_review(session, author, category)
        second = make_review(session, author, category, title="Other")
        CommentCRUD.create(session, first.id, author.id, "Note")

        assert CommentCRUD.count_by_review(session, [first.id, second.id]) == {
            first.id: 1,
            second.id: 0,
        }
