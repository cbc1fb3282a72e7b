"""
Tests para SyncUnit y RunContext.
"""
import pytest

from synchronisable.application.context import RecordFailure, RunContext
from synchronisable.application.sync_unit import SyncUnit
from synchronisable.domain.synchronizer import SynchronizerBuilder
from synchronisable.shared.exceptions import (
    ConfigurationError,
    MissingRemoteIdentityError,
    RecordValidationError,
    RemoteRecordNotFoundError,
)


@pytest.fixture
def player_synchronizer():
    return (
        SynchronizerBuilder("Player")
        .remote_id("player_id")
        .mappings({"eman_tsrif": "first_name", "pihsnezitic": None})
        .has_one("team", target="Team", key="team")
        .find(lambda remote_id: {"player_id": remote_id, "eman_tsrif": "Ana"} if remote_id == "p1" else None)
        .build()
    )


class TestSyncUnit:

    def test_build_resolves_identity_and_attributes(self, player_synchronizer, linkage) -> None:
        remote = {"player_id": "p1", "eman_tsrif": "Ana", "pihsnezitic": "AR", "team": "t1"}
        unit = SyncUnit(player_synchronizer, remote)

        unit.build(linkage)

        assert unit.remote_id == "p1"
        assert unit.local_attrs == {"first_name": "Ana"}
        assert list(unit.associations.values()) == [["t1"]]
        assert unit.updatable is False
        assert unit.local_record is None
        assert remote["player_id"] == "p1"

    def test_build_with_existing_link_is_updatable(self, player_synchronizer, linkage, store) -> None:
        entity = store.create("Player", {"first_name": "Ana"})
        linkage.link("Player", store.identity_of(entity), "p1", {"first_name": "Ana"})
        unit = SyncUnit(player_synchronizer, {"player_id": "p1", "eman_tsrif": "Ana B."})

        unit.build(linkage)

        assert unit.updatable is True
        assert unit.local_record is entity
        assert unit.import_record.remote_id == "p1"

    def test_build_from_remote_id(self, player_synchronizer, linkage) -> None:
        unit = SyncUnit(player_synchronizer, "p1")

        unit.build(linkage)

        assert unit.remote_id == "p1"
        assert unit.local_attrs == {"first_name": "Ana"}

    def test_build_from_unknown_remote_id(self, player_synchronizer, linkage) -> None:
        with pytest.raises(RemoteRecordNotFoundError):
            SyncUnit(player_synchronizer, "p404").build(linkage)

    def test_build_from_remote_id_without_find(self, linkage) -> None:
        synchronizer = SynchronizerBuilder("Player").build()

        with pytest.raises(ConfigurationError):
            SyncUnit(synchronizer, "p1").build(linkage)

    @pytest.mark.parametrize("item", [None, "", "  ", []])
    def test_build_from_blank_item(self, item, linkage) -> None:
        synchronizer = SynchronizerBuilder("Player").remote_id("player_id").build()

        with pytest.raises(MissingRemoteIdentityError) as exc_info:
            SyncUnit(synchronizer, item).build(linkage)

        assert exc_info.value.details["remote_id_field"] == "player_id"

    def test_build_without_remote_id(self, player_synchronizer, linkage) -> None:
        with pytest.raises(MissingRemoteIdentityError):
            SyncUnit(player_synchronizer, {"eman_tsrif": "Ana"}).build(linkage)

    def test_attach_only_once(self, player_synchronizer) -> None:
        unit = SyncUnit(player_synchronizer, {"player_id": "p1"})
        unit.attach(object())

        with pytest.raises(RuntimeError):
            unit.attach(object())

    def test_references_walks_ancestors(self, player_synchronizer, linkage) -> None:
        team = SynchronizerBuilder("Team").build()
        parent = SyncUnit(team, {"id": 10})
        parent.build(linkage)
        child = SyncUnit(player_synchronizer, {"player_id": "p1"}, parent=parent)
        child.build(linkage)

        assert child.references("Team", "10")
        assert child.references("Player", "p1")
        assert not child.references("Player", "10")
        assert [u.entity_type for u in child.ancestors()] == ["Team"]

    def test_dump_message(self, player_synchronizer, linkage) -> None:
        unit = SyncUnit(player_synchronizer, {"player_id": "p1", "eman_tsrif": "Ana", "team": "t1"})
        unit.build(linkage)

        message = unit.dump_message()

        assert message.startswith("Player remote id: 'p1'")
        assert "local attrs: {'first_name': 'Ana'}" in message
        assert "associations: {'team': ['t1']}" in message
        assert repr(unit) == "<SyncUnit(Player, remote_id='p1')>"


class TestRunContext:

    def test_summary_message(self) -> None:
        context = RunContext("Stage", parent_type="Tournament", before=1, after=3, created=2, skipped=1)

        assert context.summary_message() == (
            "Stage synchronization summary (padre: Tournament): before=1, after=3, "
            "deleted=0, created=2, updated=0, skipped=1, errors=0"
        )

    def test_has_errors_includes_children(self) -> None:
        parent = RunContext("Tournament")
        child = RunContext("Stage", parent_type="Tournament")
        parent.children.append(child)
        assert not parent.has_errors

        error = RecordValidationError("Stage", "name requerido")
        child.add_failure(RecordFailure("Stage", "X", {"id": "X"}, error))

        assert parent.has_errors
        assert parent.failed == 0
        assert [f.error_code for f in parent.all_failures()] == ["VALIDATION_ERROR"]
        assert parent.all_failures()[0].message == "Stage: validación fallida - name requerido"
