"""In-memory mirror of the record store's student list."""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from gradebook.errors import DuplicateId, NotFound
from gradebook.models import Student

logger = logging.getLogger(__name__)


class RosterCache:
    """
    Ordered list of students keyed by store-assigned id.

    Order is arrival order from the store followed by local appends.
    Persisting changes is the caller's job and must happen first.
    """

    def __init__(self):
        self._students: List[Student] = []
        self._index: Dict[str, int] = {}

    @property
    def students(self) -> Tuple[Student, ...]:
        return tuple(self._students)

    def __len__(self) -> int:
        return len(self._students)

    def __contains__(self, student_id: object) -> bool:
        return str(student_id) in self._index

    def get(self, student_id: str) -> Optional[Student]:
        position = self._index.get(str(student_id))
        if position is None:
            return None
        return self._students[position]

    def grades(self) -> List[float]:
        return [s.grade for s in self._students]

    def load(self, students: Iterable[Student]) -> None:
        """Replace the roster wholesale; duplicate ids leave it untouched."""
        incoming = list(students)
        index: Dict[str, int] = {}
        for position, student in enumerate(incoming):
            if student.id in index:
                raise DuplicateId(student.id)
            index[student.id] = position

        self._students = incoming
        self._index = index
        logger.info("Roster loaded with %d students", len(incoming))

    def append(self, student: Student) -> None:
        if student.id in self._index:
            raise DuplicateId(student.id)
        self._index[student.id] = len(self._students)
        self._students.append(student)

    def patch_grade(self, student_id: str, new_grade: float) -> Student:
        """Replace one student's grade and return the updated record."""
        student_id = str(student_id)
        position = self._index.get(student_id)
        if position is None:
            raise NotFound(student_id)

        updated = self._students[position].model_copy(update={"grade": float(new_grade)})
        self._students[position] = updated
        return updated
