"""
Tests unitarios para Synchronizer: mapeo de atributos, extracción de id
remoto, asociaciones y callbacks.
"""
import pytest

from synchronisable.domain.synchronizer import Association, SynchronizerBuilder, is_blank
from synchronisable.shared.exceptions import (
    MissingAssociationError,
    MissingRemoteIdentityError,
)


@pytest.fixture
def player_synchronizer():
    return (
        SynchronizerBuilder("Player")
        .remote_id("player_id")
        .mappings(
            {
                "eman_tsrif": "first_name",
                "eman_tsal": "last_name",
                "thgieh": "height",
                "pihsnezitic": None,
            }
        )
        .build()
    )


class TestMapAttributes:
    """Renombrado -> only -> except -> defaults."""

    def test_renames_mapped_fields_and_keeps_unmapped(self, player_synchronizer) -> None:
        result = player_synchronizer.map_attributes(
            {"eman_tsrif": "Lionel", "eman_tsal": "Messi", "nickname": "Leo"}
        )

        assert result == {"first_name": "Lionel", "last_name": "Messi", "nickname": "Leo"}

    def test_field_mapped_to_none_is_dropped(self, player_synchronizer) -> None:
        result = player_synchronizer.map_attributes({"eman_tsrif": "Lionel", "pihsnezitic": "AR"})

        assert result == {"first_name": "Lionel"}
        assert None not in result

    def test_only_and_except_precedence(self) -> None:
        synchronizer = SynchronizerBuilder("Foo").only("a", "b").except_("b").build()

        assert synchronizer.map_attributes({"a": 1, "b": 2, "c": 3}) == {"a": 1}

    def test_only_applies_to_local_names(self, player_synchronizer) -> None:
        synchronizer = (
            SynchronizerBuilder("Player")
            .mappings({"eman_tsrif": "first_name", "thgieh": "height"})
            .only("first_name")
            .build()
        )

        assert synchronizer.map_attributes({"eman_tsrif": "Ana", "thgieh": 160}) == {"first_name": "Ana"}

    def test_except_without_only(self) -> None:
        synchronizer = SynchronizerBuilder("Foo").except_("secret").build()

        assert synchronizer.map_attributes({"name": "x", "secret": "y"}) == {"name": "x"}

    def test_mapping_is_idempotent_with_identity_mapping(self) -> None:
        synchronizer = (
            SynchronizerBuilder("Foo")
            .mappings({"a": "a", "b": "b"})
            .only("a", "b", "c")
            .except_("c")
            .defaults(b=0)
            .build()
        )
        once = synchronizer.map_attributes({"a": 1, "c": 3, "d": 4})

        assert synchronizer.map_attributes(once) == once

    def test_defaults_fill_only_missing_keys(self) -> None:
        synchronizer = SynchronizerBuilder("Team").defaults(country="ES", name="?").build()

        result = synchronizer.map_attributes({"name": "Barcelona"})

        assert result == {"name": "Barcelona", "country": "ES"}

    def test_does_not_mutate_input(self, player_synchronizer) -> None:
        attrs = {"eman_tsrif": "Lionel"}
        player_synchronizer.map_attributes(attrs)

        assert attrs == {"eman_tsrif": "Lionel"}


class TestExtractRemoteId:

    def test_pops_remote_id(self, player_synchronizer) -> None:
        attrs = {"player_id": "p1", "eman_tsrif": "Lionel"}

        assert player_synchronizer.extract_remote_id(attrs) == "p1"
        assert "player_id" not in attrs

    @pytest.mark.parametrize("attrs", [{}, {"player_id": None}, {"player_id": "  "}])
    def test_missing_or_blank_remote_id_raises(self, player_synchronizer, attrs) -> None:
        with pytest.raises(MissingRemoteIdentityError) as exc_info:
            player_synchronizer.extract_remote_id(attrs)

        assert exc_info.value.error_code == "MISSING_REMOTE_ID"
        assert exc_info.value.details["remote_id_field"] == "player_id"

    def test_zero_is_a_valid_remote_id(self) -> None:
        synchronizer = SynchronizerBuilder("Foo").build()

        assert synchronizer.extract_remote_id({"id": 0}) == 0

    def test_peek_remote_id_does_not_mutate(self, player_synchronizer) -> None:
        attrs = {"player_id": "p1"}

        assert player_synchronizer.peek_remote_id(attrs) == "p1"
        assert attrs == {"player_id": "p1"}
        assert player_synchronizer.peek_remote_id("p2") == "p2"
        assert player_synchronizer.peek_remote_id({}) is None


class TestAssociations:

    def test_has_one_and_has_many_default_keys(self) -> None:
        synchronizer = (
            SynchronizerBuilder("Tournament")
            .has_one("champion", target="Team")
            .has_many("stages", target="Stage")
            .has_many("categories", target="Category")
            .has_many("matches", target="Match")
            .has_many("boxes", target="Box")
            .has_many("classes", target="Class")
            .build()
        )

        keys = [a.key for a in synchronizer.associations]
        assert keys == ["champion_id", "stage_ids", "category_ids", "match_ids", "box_ids", "class_ids"]
        assert [a.many for a in synchronizer.associations] == [False, True, True, True, True, True]

    def test_associations_for_preserves_source_order(self) -> None:
        synchronizer = (
            SynchronizerBuilder("Tournament")
            .has_many("stages", target="Stage")
            .has_one("champion", target="Team")
            .build()
        )

        result = synchronizer.associations_for({"stage_ids": ["s2", "s1", ""], "champion_id": "t1"})

        assert [(a.name, ids) for a, ids in result.items()] == [
            ("stages", ["s2", "s1"]),
            ("champion", ["t1"]),
        ]

    def test_absent_association_yields_empty_list(self) -> None:
        synchronizer = SynchronizerBuilder("Tournament").has_many("stages", target="Stage").build()

        result = synchronizer.associations_for({})

        assert list(result.values()) == [[]]

    def test_required_association_missing_raises(self) -> None:
        synchronizer = (
            SynchronizerBuilder("Player").has_one("team", target="Team", key="team", required=True).build()
        )

        with pytest.raises(MissingAssociationError):
            synchronizer.associations_for({"team": None})

    def test_association_extract_scalar_for_has_many(self) -> None:
        association = Association(name="stages", target="Stage", key="stage_ids", many=True)

        assert association.extract({"stage_ids": "s1"}) == ["s1"]


class TestCallbacks:

    def test_before_returning_false_cancels_action_and_after(self) -> None:
        calls = []
        synchronizer = (
            SynchronizerBuilder("Foo")
            .hooks(
                before_record_sync=lambda unit: False,
                after_record_sync=lambda unit: calls.append("after"),
            )
            .build()
        )

        executed = synchronizer.with_callbacks("record_sync", lambda: calls.append("action"), object())

        assert executed is False
        assert calls == []

    def test_before_returning_none_continues(self) -> None:
        calls = []
        synchronizer = (
            SynchronizerBuilder("Foo")
            .hooks(
                before_sync=lambda unit: calls.append("before"),
                after_sync=lambda unit: calls.append("after"),
            )
            .build()
        )

        executed = synchronizer.with_callbacks("sync", lambda: calls.append("action"), object())

        assert executed is True
        assert calls == ["before", "action", "after"]

    def test_association_hooks_receive_id_and_association(self) -> None:
        received = []
        synchronizer = (
            SynchronizerBuilder("Foo")
            .hooks(before_association_sync=lambda unit, remote_id, association: received.append(
                (unit, remote_id, association.name)
            ))
            .has_one("bar", target="Bar")
            .build()
        )
        association = synchronizer.association("bar")

        synchronizer.with_callbacks("association_sync", lambda: None, "unit", "b1", association)

        assert received == [("unit", "b1", "bar")]


def test_fetch_data_without_hook_is_empty() -> None:
    assert SynchronizerBuilder("Foo").build().fetch_data() == []


def test_fetch_data_handles_none() -> None:
    assert SynchronizerBuilder("Foo").fetch(lambda: None).build().fetch_data() == []


@pytest.mark.parametrize(
    "value, expected",
    [(None, True), ("", True), (" ", True), ([], True), ({}, True), (0, False), ("x", False), ([1], False)],
)
def test_is_blank(value, expected) -> None:
    assert is_blank(value) is expected
