"""Classification of course activities as formative, summative or dummy."""

from __future__ import annotations

import logging
from typing import Optional

from config.settings import get_settings
from models import AssessTypeKind, AssessTypeRecord

from app.repositories.assess_type_repo import AssessTypeRepository
from .strings import LanguageStringTranslator, Translator

logger = logging.getLogger(__name__)

# Activity modules which can be marked summative.
SUMMATIVE_MODULES = frozenset({"assign", "quiz", "workshop", "turnitintooltwo"})

_TYPE_STRING_KEYS = {
    AssessTypeKind.FORMATIVE: "formative",
    AssessTypeKind.SUMMATIVE: "summative",
    AssessTypeKind.DUMMY: "dummy",
}


_TYPE_ERROR = "type must be 0 (formative), 1 (summative) or 2 (dummy)."


class AssessTypeIntegrityError(RuntimeError):
    """Raised when a stored type value is not a known assess type."""


def can_be_summative(modname: str) -> bool:
    """Return True when the activity module can be marked summative."""
    return modname in SUMMATIVE_MODULES


def parse_type(value: object) -> AssessTypeKind:
    """Coerce an int (or digit string) into an AssessTypeKind, raising ValueError."""
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(_TYPE_ERROR)
    try:
        return AssessTypeKind(value)
    except ValueError:
        raise ValueError(_TYPE_ERROR) from None


class AssessTypeStore:
    """Read, write and lock accessors for activity classifications."""

    def __init__(self, repository: AssessTypeRepository, translator: Translator) -> None:
        self.repository = repository
        self.translator = translator

    @staticmethod
    def can_be_summative(modname: str) -> bool:
        return can_be_summative(modname)

    def get_type_int(
        self, cmid: int, gradeitemid: Optional[int] = None
    ) -> Optional[AssessTypeKind]:
        """Return the activity's classification, or None when unclassified.

        Without ``gradeitemid`` the activity's lowest grade item answers.
        """
        record = self.repository.get_record(cmid, gradeitemid)
        if record is None:
            return None
        return self._kind_of(record)

    def get_type_name(self, cmid: int, gradeitemid: Optional[int] = None) -> Optional[str]:
        kind = self.get_type_int(cmid, gradeitemid)
        if kind is None:
            return None
        return self.translator.resolve(_TYPE_STRING_KEYS[kind])

    def is_summative(self, cmid: int) -> bool:
        return self.get_type_int(cmid) == AssessTypeKind.SUMMATIVE

    def is_locked(self, cmid: int) -> bool:
        record = self.repository.get_record(cmid)
        return bool(record is not None and record.locked)

    def update_type(
        self,
        courseid: int,
        type: int,
        cmid: int = 0,
        gradeitemid: int = 0,
        locked: bool = False,
    ) -> None:
        """Create or change the classification of (cmid, gradeitemid).

        Nothing is written when the stored type and locked flag already match.
        Storage errors propagate as models.StorageError.
        """
        kind = parse_type(type)
        written = self.repository.upsert(
            courseid=courseid,
            type=kind,
            cmid=cmid,
            gradeitemid=gradeitemid,
            locked=bool(locked),
        )
        if written:
            logger.info(
                "Assess type for cm %s (grade item %s, course %s) set to %s, locked=%s",
                cmid,
                gradeitemid,
                courseid,
                kind.name.lower(),
                bool(locked),
            )
        else:
            logger.debug("Assess type for cm %s (grade item %s) unchanged", cmid, gradeitemid)

    def get_records_by_course(
        self,
        courseid: int,
        type: Optional[int] = None,
    ) -> list[AssessTypeRecord]:
        kind = parse_type(type) if type is not None else None
        return self.repository.get_records(courseid, kind)

    def _kind_of(self, record: AssessTypeRecord) -> AssessTypeKind:
        try:
            return AssessTypeKind(record.type)
        except ValueError:
            logger.error(
                "Stored assess type %r for cm %s (record %s) is not a known type",
                record.type,
                record.cmid,
                record.id,
            )
            raise AssessTypeIntegrityError(
                f"Unknown assess type {record.type!r} stored for cm {record.cmid}."
            ) from None


def build_store(connection=None) -> AssessTypeStore:
    """Return a store wired to the configured database and language."""
    settings = get_settings()
    return AssessTypeStore(
        AssessTypeRepository(connection),
        LanguageStringTranslator(settings.ASSESS_TYPE_LANG),
    )
