"""Record store contract and an in-memory implementation."""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol

from gradebook.errors import StoreFailure

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Remote student records. Implementations raise StoreFailure on error."""

    async def fetch_all(self) -> List[Dict[str, Any]]:
        ...

    async def insert(self, name: str, grade: float) -> str:
        ...

    async def update_grade(self, student_id: str, grade: float) -> None:
        ...


def generate_id() -> str:
    return uuid.uuid4().hex


class InMemoryRecordStore:
    """
    Record store kept in process memory.

    Records are returned in insertion order. Seed records without an
    'id' are assigned one.
    """

    def __init__(self, records: Optional[Iterable[Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        for record in records or []:
            record_id = record.get('id')
            record_id = generate_id() if record_id is None else str(record_id)
            self._records[record_id] = {
                'id': record_id,
                'name': record['name'],
                'grade': record['grade'],
            }

    async def fetch_all(self) -> List[Dict[str, Any]]:
        return [dict(record) for record in self._records.values()]

    async def insert(self, name: str, grade: float) -> str:
        record_id = generate_id()
        self._records[record_id] = {'id': record_id, 'name': name, 'grade': grade}
        logger.debug("Inserted student record %s", record_id)
        return record_id

    async def update_grade(self, student_id: str, grade: float) -> None:
        record = self._records.get(str(student_id))
        if record is None:
            raise StoreFailure(f"No stored record with id '{student_id}'")
        record['grade'] = grade
        logger.debug("Updated grade for student record %s", student_id)
