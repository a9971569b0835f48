"""Unit tests for the Tenant aggregate."""

import pytest

from access.domain.aggregates import Tenant
from access.domain.aggregates.tenant import DEFAULT_BRAND_COLOR, normalize_slug
from access.domain.exceptions import ValidationError
from access.domain.value_objects import ApprovalStatus, CategoryType, UserId


class TestTenantCreation:
    """Tests for Tenant.create()."""

    def test_root_tenant_is_level_zero(self):
        tenant = Tenant.create(name="Texas", slug="texas")

        assert tenant.parent_id is None
        assert tenant.hierarchy_level == 0
        assert tenant.approval_status == ApprovalStatus.APPROVED
        assert tenant.brand_color == DEFAULT_BRAND_COLOR

    def test_child_level_is_parent_level_plus_one(self):
        root = Tenant.create(name="Texas", slug="texas")
        child = Tenant.create(name="Austin", slug="austin", parent=root)
        grandchild = Tenant.create(name="East Austin", slug="east-austin", parent=child)

        assert child.parent_id == root.id
        assert child.hierarchy_level == 1
        assert grandchild.hierarchy_level == 2

    def test_slug_is_normalized(self):
        tenant = Tenant.create(name="Rio Grande", slug="  Rio  Grande ")

        assert tenant.slug == "rio-grande"

    def test_blank_name_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Tenant.create(name="   ", slug="blank")

        assert exc_info.value.field == "name"

    def test_invalid_slug_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Tenant.create(name="Bad", slug="bad_slug!")

        assert exc_info.value.field == "slug"

    def test_pending_submission_records_owner_and_submission_time(self):
        owner = UserId.from_string("user-1")
        tenant = Tenant.create(
            name="Guild",
            slug="guild",
            owner_id=owner,
            approval_status=ApprovalStatus.PENDING,
        )

        assert tenant.owner_id == owner
        assert tenant.submitted_at is not None

    def test_attributes_are_applied(self):
        tenant = Tenant.create(
            name="School",
            slug="school",
            category_type="school",
            brand_color="#aabbcc",
            game_titles=["Chess"],
        )

        assert tenant.category_type == CategoryType.SCHOOL
        assert tenant.brand_color == "#AABBCC"
        assert tenant.game_titles == ["Chess"]


class TestTenantUpdate:
    """Tests for Tenant.update()."""

    def test_returns_diff_of_changed_fields_only(self):
        tenant = Tenant.create(name="Old", slug="old", location="Dallas")

        diff = tenant.update(name="New", slug="old", location="Dallas")

        assert diff == {"name": {"from": "Old", "to": "New"}}

    def test_no_change_returns_empty_diff(self):
        tenant = Tenant.create(name="Same", slug="same")
        before = tenant.updated_at

        assert tenant.update(name="Same") == {}
        assert tenant.updated_at == before

    def test_unknown_field_is_rejected(self):
        tenant = Tenant.create(name="T", slug="t")

        with pytest.raises(ValidationError):
            tenant.update(hierarchy_level=4)

    def test_bad_brand_color_is_rejected(self):
        tenant = Tenant.create(name="T", slug="t")

        with pytest.raises(ValidationError) as exc_info:
            tenant.update(brand_color="blue")

        assert exc_info.value.field == "brand_color"

    def test_unknown_category_is_rejected(self):
        tenant = Tenant.create(name="T", slug="t")

        with pytest.raises(ValidationError):
            tenant.update(category_type="casino")


class TestTenantReview:
    """Tests for Tenant.review()."""

    def test_approving_marks_verified(self):
        tenant = Tenant.create(
            name="T", slug="t", approval_status=ApprovalStatus.PENDING
        )
        reviewer = UserId.from_string("admin-1")

        diff = tenant.review(ApprovalStatus.APPROVED, reviewer)

        assert tenant.approval_status == ApprovalStatus.APPROVED
        assert tenant.is_verified is True
        assert tenant.reviewed_by == reviewer
        assert diff["approval_status"] == {"from": "pending", "to": "approved"}

    def test_rejecting_requires_notes(self):
        tenant = Tenant.create(
            name="T", slug="t", approval_status=ApprovalStatus.PENDING
        )

        with pytest.raises(ValidationError) as exc_info:
            tenant.review(ApprovalStatus.REJECTED, UserId.from_string("admin-1"), " ")

        assert exc_info.value.field == "notes"
        assert tenant.approval_status == ApprovalStatus.PENDING

    def test_cannot_return_to_pending(self):
        tenant = Tenant.create(name="T", slug="t")

        with pytest.raises(ValidationError):
            tenant.review(ApprovalStatus.PENDING, UserId.from_string("admin-1"))


def test_normalize_slug_collapses_whitespace():
    assert normalize_slug(" Big   Spring TX ") == "big-spring-tx"
