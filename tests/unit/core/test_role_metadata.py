"""Unit tests for worship role metadata: resolution and assignment lifecycle."""

from datetime import UTC, datetime

from worship.core.role_metadata import (
    RoleAssignment,
    WorshipUserMetadata,
    create_assignment,
    get_worship_role_from_metadata,
    merge_assignment,
    resolve_effective_role,
    revoke_assignment,
    update_church_assignment,
)
from worship.core.roles import WorshipRole

from tests.helpers.mock_factories import make_assignment, make_metadata

ORG_A = "org-a"
ORG_B = "org-b"


class TestResolveEffectiveRole:
    """Precedence: active entry > revoked entry > native role > default > member."""

    def test_active_assignment_wins_over_native_role(self):
        metadata = make_metadata({ORG_A: make_assignment("collaborator")})
        assert resolve_effective_role("org:admin", metadata, ORG_A) is WorshipRole.COLLABORATOR

    def test_revoked_assignment_beats_elevated_native_role(self):
        metadata = make_metadata({ORG_A: make_assignment("pastor", is_active=False)})
        assert resolve_effective_role("org:admin", metadata, ORG_A) is WorshipRole.MEMBER

    def test_native_role_used_without_entry(self):
        metadata = make_metadata({ORG_B: make_assignment("collaborator")})
        assert resolve_effective_role("org:pastor", metadata, ORG_A) is WorshipRole.PASTOR

    def test_native_role_used_without_metadata(self):
        assert resolve_effective_role("org:worship_leader", None, ORG_A) is (
            WorshipRole.WORSHIP_LEADER
        )

    def test_default_role_when_nothing_else(self):
        metadata = make_metadata(default_role="collaborator")
        assert resolve_effective_role("org:member", metadata, ORG_A) is WorshipRole.COLLABORATOR

    def test_nothing_resolves_to_member(self):
        assert resolve_effective_role(None, None, ORG_A) is WorshipRole.MEMBER
        assert resolve_effective_role("org:owner", make_metadata(), ORG_A) is WorshipRole.MEMBER


class TestGetWorshipRoleFromMetadata:
    def test_active_entry(self):
        metadata = make_metadata({ORG_A: make_assignment("worship_leader")})
        assert get_worship_role_from_metadata(metadata, ORG_A) is WorshipRole.WORSHIP_LEADER

    def test_inactive_entry_is_member(self):
        metadata = make_metadata({ORG_A: make_assignment("admin", is_active=False)})
        assert get_worship_role_from_metadata(metadata, ORG_A) is WorshipRole.MEMBER

    def test_missing_entry_uses_default_role(self):
        assert get_worship_role_from_metadata(
            make_metadata(default_role="pastor"), ORG_A
        ) is WorshipRole.PASTOR

    def test_missing_metadata_is_member(self):
        assert get_worship_role_from_metadata(None, ORG_A) is WorshipRole.MEMBER


class TestCreateAssignment:
    def test_creates_active_entry(self):
        entry = create_assignment(ORG_A, "pastor", "assigner-1", church_id=7)
        assignment = entry[ORG_A]
        assert list(entry) == [ORG_A]
        assert assignment.role is WorshipRole.PASTOR
        assert assignment.church_id == 7
        assert assignment.assigned_by == "assigner-1"
        assert assignment.is_active is True
        assert assignment.assigned_at.tzinfo is not None

    def test_assigned_at_round_trips_through_iso_format(self):
        assignment = create_assignment(ORG_A, "collaborator", "assigner-1")[ORG_A]
        raw = assignment.model_dump(mode="json")
        assert RoleAssignment.model_validate(raw).assigned_at == assignment.assigned_at
        assert assignment.assigned_at.microsecond == 0


class TestMergeAssignment:
    def test_replaces_same_org_and_keeps_others(self):
        existing = make_metadata(
            {ORG_A: make_assignment("collaborator"), ORG_B: make_assignment("pastor")}
        )
        merged = merge_assignment(existing, create_assignment(ORG_A, "admin", "assigner-2"))

        assert merged.worship_roles[ORG_A].role is WorshipRole.ADMIN
        assert merged.worship_roles[ORG_B] == existing.worship_roles[ORG_B]

    def test_does_not_mutate_input(self):
        existing = make_metadata({ORG_A: make_assignment("collaborator")})
        merge_assignment(existing, create_assignment(ORG_A, "admin", "assigner-2"))
        assert existing.worship_roles[ORG_A].role is WorshipRole.COLLABORATOR

    def test_absent_metadata_treated_as_empty(self):
        merged = merge_assignment(None, create_assignment(ORG_A, "pastor", "x"))
        assert list(merged.worship_roles) == [ORG_A]

    def test_unrelated_keys_preserved(self):
        existing = WorshipUserMetadata.from_raw({"provider": "email", "worship_roles": {}})
        merged = merge_assignment(existing, create_assignment(ORG_A, "pastor", "x"))
        assert merged.to_raw()["provider"] == "email"


class TestRevokeAssignment:
    def test_flips_active_flag_and_keeps_record(self):
        existing = make_metadata({ORG_A: make_assignment("pastor", church_id=3)})
        revoked = revoke_assignment(existing, ORG_A)

        assignment = revoked.worship_roles[ORG_A]
        assert assignment.is_active is False
        assert assignment.role is WorshipRole.PASTOR
        assert assignment.church_id == 3
        assert existing.worship_roles[ORG_A].is_active is True

    def test_idempotent(self):
        existing = make_metadata({ORG_A: make_assignment("pastor")})
        once = revoke_assignment(existing, ORG_A)
        assert revoke_assignment(once, ORG_A) == once

    def test_missing_entry_returns_input_unchanged(self):
        existing = make_metadata({ORG_B: make_assignment("pastor")})
        assert revoke_assignment(existing, ORG_A) == existing

    def test_absent_metadata_returns_empty(self):
        assert revoke_assignment(None, ORG_A) == WorshipUserMetadata()

    def test_revoked_user_resolves_to_member(self):
        existing = make_metadata({ORG_A: make_assignment("admin")})
        revoked = revoke_assignment(existing, ORG_A)
        assert resolve_effective_role("org:admin", revoked, ORG_A) is WorshipRole.MEMBER


class TestUpdateChurchAssignment:
    def test_changes_only_church(self):
        existing = make_metadata({ORG_A: make_assignment("worship_leader", church_id=1)})
        updated = update_church_assignment(existing, ORG_A, 2)

        assert updated.worship_roles[ORG_A].church_id == 2
        assert updated.worship_roles[ORG_A].role is WorshipRole.WORSHIP_LEADER
        assert existing.worship_roles[ORG_A].church_id == 1

    def test_missing_entry_returns_input(self):
        existing = make_metadata()
        assert update_church_assignment(existing, ORG_A, 2) is existing


class TestRawMetadata:
    def test_parses_provider_blob(self):
        metadata = WorshipUserMetadata.from_raw(
            {
                "worship_roles": {
                    ORG_A: {
                        "role": "pastor",
                        "church_id": 12,
                        "assigned_by": "u-1",
                        "assigned_at": "2026-03-01T10:00:00Z",
                        "is_active": True,
                    }
                },
                "default_role": "collaborator",
            }
        )
        assignment = metadata.get_assignment(ORG_A)
        assert assignment.role is WorshipRole.PASTOR
        assert assignment.assigned_at == datetime(2026, 3, 1, 10, 0, tzinfo=UTC)
        assert metadata.default_role is WorshipRole.COLLABORATOR

    def test_unknown_role_strings_become_member(self):
        metadata = WorshipUserMetadata.from_raw({"default_role": "bishop"})
        assert metadata.default_role is WorshipRole.MEMBER

    def test_none_is_empty(self):
        assert WorshipUserMetadata.from_raw(None) == WorshipUserMetadata()

    def test_to_raw_omits_missing_default(self):
        raw = make_metadata({ORG_A: make_assignment("pastor")}).to_raw()
        assert "default_role" not in raw
        assert raw["worship_roles"][ORG_A]["role"] == "pastor"

    def test_partial_entry_is_dropped(self):
        metadata = WorshipUserMetadata.from_raw(
            {
                "worship_roles": {
                    ORG_A: {"role": "pastor"},
                    ORG_B: {
                        "role": "collaborator",
                        "assigned_by": "u-1",
                        "assigned_at": "2026-03-01T10:00:00Z",
                    },
                }
            }
        )

        assert metadata.get_assignment(ORG_A) is None
        assert metadata.get_assignment(ORG_B).role is WorshipRole.COLLABORATOR
        assert get_worship_role_from_metadata(metadata, ORG_A) is WorshipRole.MEMBER

    def test_unparseable_entries_and_maps_are_ignored(self):
        bad_date = WorshipUserMetadata.from_raw(
            {
                "worship_roles": {
                    ORG_A: {"role": "admin", "assigned_by": "u-1", "assigned_at": "yesterday"},
                    ORG_B: "pastor",
                }
            }
        )
        assert bad_date.worship_roles == {}

        not_a_map = WorshipUserMetadata.from_raw({"worship_roles": ["pastor"]})
        assert not_a_map.worship_roles == {}
        assert WorshipUserMetadata.from_raw("garbage") == WorshipUserMetadata()

    def test_camel_case_blob_is_read(self):
        metadata = WorshipUserMetadata.from_raw(
            {
                "worshipRoles": {
                    ORG_A: {
                        "role": "worship_leader",
                        "churchId": 4,
                        "assignedBy": "u-1",
                        "assignedAt": "2026-03-01T10:00:00Z",
                        "isActive": False,
                    }
                },
                "defaultRole": "collaborator",
            }
        )

        assignment = metadata.get_assignment(ORG_A)
        assert assignment.role is WorshipRole.WORSHIP_LEADER
        assert assignment.church_id == 4
        assert assignment.is_active is False
        assert metadata.default_role is WorshipRole.COLLABORATOR

    def test_camel_case_blob_is_rewritten_in_snake_case(self):
        metadata = WorshipUserMetadata.from_raw(
            {
                "provider": "email",
                "worshipRoles": {
                    ORG_A: {
                        "role": "pastor",
                        "assignedBy": "u-1",
                        "assignedAt": "2026-03-01T10:00:00Z",
                    }
                },
            }
        )

        raw = merge_assignment(metadata, create_assignment(ORG_B, "collaborator", "u-2")).to_raw()

        assert "worshipRoles" not in raw
        assert set(raw["worship_roles"]) == {ORG_A, ORG_B}
        assert raw["worship_roles"][ORG_A]["assigned_by"] == "u-1"
        assert raw["provider"] == "email"

    def test_stale_camel_case_keys_are_not_written_back(self):
        metadata = WorshipUserMetadata.from_raw(
            {
                "worship_roles": {
                    ORG_A: {"role": "pastor", "assigned_by": "u-1", "assigned_at": "2026-03-01T10:00:00Z"}
                },
                "worshipRoles": {ORG_B: {"role": "admin"}},
                "defaultRole": "admin",
            }
        )

        raw = metadata.to_raw()

        assert set(raw["worship_roles"]) == {ORG_A}
        assert "worshipRoles" not in raw
        assert "defaultRole" not in raw
