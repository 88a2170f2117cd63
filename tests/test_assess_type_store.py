from __future__ import annotations

from typing import Optional

import pytest

from app.services.assess_type import (
    AssessTypeIntegrityError,
    AssessTypeStore,
    can_be_summative,
)
from app.services.strings import LanguageStringTranslator
from models import AssessTypeKind, AssessTypeRecord, StorageError


@pytest.mark.parametrize("modname", ["assign", "quiz", "workshop", "turnitintooltwo"])
def test_can_be_summative_allows_listed_modules(modname):
    assert can_be_summative(modname) is True
    assert AssessTypeStore.can_be_summative(modname) is True


@pytest.mark.parametrize("modname", ["", "forum", "page", "Quiz", "assignment", " quiz"])
def test_can_be_summative_rejects_everything_else(modname):
    assert can_be_summative(modname) is False


def test_unclassified_activity_reads_as_empty(store):
    assert store.get_type_int(999) is None
    assert store.get_type_name(999) is None
    assert store.is_summative(999) is False
    assert store.is_locked(999) is False


def test_update_type_then_read_back(store):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10)

    assert store.get_type_int(10) == AssessTypeKind.SUMMATIVE
    assert store.is_summative(10) is True
    assert store.get_type_name(10) == "Summative"
    assert store.is_locked(10) is False


def test_formative_is_a_classification_not_absence(store):
    store.update_type(courseid=5, type=AssessTypeKind.FORMATIVE, cmid=11)

    assert store.get_type_int(11) == AssessTypeKind.FORMATIVE
    assert store.get_type_name(11) == "Formative"
    assert store.is_summative(11) is False


def test_dummy_type_name(store):
    store.update_type(courseid=5, type=AssessTypeKind.DUMMY, cmid=12)
    assert store.get_type_name(12) == "Dummy"


def test_identical_update_performs_no_second_write(store, connection, repository):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10, locked=True)
    changes_before = connection.total_changes
    first = repository.get_record(10, 0)

    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10, locked=True)

    assert connection.total_changes == changes_before
    assert repository.get_record(10, 0) == first


def test_identical_type_and_lock_skips_courseid_change(store, repository):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10)
    store.update_type(courseid=6, type=AssessTypeKind.SUMMATIVE, cmid=10)

    assert repository.get_record(10, 0).courseid == 5


def test_changed_type_updates_in_place(store, repository):
    store.update_type(courseid=5, type=AssessTypeKind.FORMATIVE, cmid=10)
    original = repository.get_record(10, 0)

    store.update_type(courseid=7, type=AssessTypeKind.SUMMATIVE, cmid=10)
    updated = repository.get_record(10, 0)

    assert updated.id == original.id
    assert updated.type == AssessTypeKind.SUMMATIVE
    assert updated.courseid == 7
    assert repository.count() == 1


def test_lock_change_alone_triggers_write(store, connection):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10)
    changes_before = connection.total_changes

    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10, locked=True)

    assert connection.total_changes == changes_before + 1
    assert store.is_locked(10) is True


def test_is_locked_only_for_existing_locked_record(store):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=20, locked=False)
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=21, locked=True)

    assert store.is_locked(20) is False
    assert store.is_locked(21) is True
    assert store.is_locked(22) is False


def test_grade_items_are_separate_records(store, repository):
    store.update_type(courseid=5, type=AssessTypeKind.FORMATIVE, cmid=30, gradeitemid=0)
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=30, gradeitemid=301)

    assert repository.count() == 2
    assert repository.get_record(30, 301).type == AssessTypeKind.SUMMATIVE
    # Lookups by activity alone use the lowest grade item.
    assert store.get_type_int(30) == AssessTypeKind.FORMATIVE
    assert store.get_type_name(30, 301) == "Summative"
    assert store.get_type_int(30, 999) is None


def test_get_records_by_course_filters(store):
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=1)
    store.update_type(courseid=5, type=AssessTypeKind.FORMATIVE, cmid=2)
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=3)
    store.update_type(courseid=6, type=AssessTypeKind.SUMMATIVE, cmid=4)

    all_records = store.get_records_by_course(5)
    assert sorted(r.cmid for r in all_records) == [1, 2, 3]

    summative = store.get_records_by_course(5, AssessTypeKind.SUMMATIVE)
    assert sorted(r.cmid for r in summative) == [1, 3]
    assert all(r.courseid == 5 for r in summative)

    formative = store.get_records_by_course(5, AssessTypeKind.FORMATIVE)
    assert [r.cmid for r in formative] == [2]

    assert store.get_records_by_course(99) == []


def test_update_type_rejects_unknown_type_without_writing(store, connection):
    changes_before = connection.total_changes
    with pytest.raises(ValueError):
        store.update_type(courseid=5, type=7, cmid=10)
    assert connection.total_changes == changes_before


@pytest.mark.parametrize("value", [0.7, 1.9, "1.0", "summative", None, True])
def test_update_type_rejects_non_integer_type(store, connection, value):
    changes_before = connection.total_changes
    with pytest.raises(ValueError):
        store.update_type(courseid=5, type=value, cmid=10)
    assert connection.total_changes == changes_before
    assert store.get_type_int(10) is None


def test_digit_string_type_is_accepted(store):
    store.update_type(courseid=5, type=" 2 ", cmid=10)
    assert store.get_type_int(10) == AssessTypeKind.DUMMY


def test_get_records_by_course_rejects_float_filter(store):
    with pytest.raises(ValueError):
        store.get_records_by_course(5, 1.0)


class _StaticRepository:
    def __init__(self, record: Optional[AssessTypeRecord]):
        self.record = record

    def get_record(self, cmid, gradeitemid=None):
        return self.record


def test_unknown_stored_type_is_an_integrity_error():
    record = AssessTypeRecord(id=1, cmid=10, gradeitemid=0, courseid=5, type=9, locked=False)
    store = AssessTypeStore(_StaticRepository(record), LanguageStringTranslator("en"))

    with pytest.raises(AssessTypeIntegrityError):
        store.get_type_name(10)


class _RecordingTranslator:
    def __init__(self):
        self.keys: list[str] = []

    def resolve(self, key: str) -> str:
        self.keys.append(key)
        return key.upper()


def test_type_name_goes_through_injected_translator(repository):
    translator = _RecordingTranslator()
    store = AssessTypeStore(repository, translator)
    store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10)

    assert store.get_type_name(10) == "SUMMATIVE"
    assert translator.keys == ["summative"]


def test_storage_failure_propagates(store, connection):
    connection.execute("DROP TABLE local_assess_type")

    with pytest.raises(StorageError):
        store.update_type(courseid=5, type=AssessTypeKind.SUMMATIVE, cmid=10)
    with pytest.raises(StorageError):
        store.get_type_int(10)
