"""Teacher session: ties the roster, thresholds and notifications together."""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from pydantic import ValidationError

from gradebook import averages, grading
from gradebook.averages import AverageTracker
from gradebook.errors import EmptyRoster, InvalidStudent, NotFound, StoreFailure
from gradebook.models import Band, GradeEvent, NotificationIntent, Student, Thresholds
from gradebook.notifier import NotificationDispatcher, Notifier
from gradebook.parsers import parse_number
from gradebook.reminders import ReminderScheduler
from gradebook.roster import RosterCache
from gradebook.store import RecordStore
from gradebook.thresholds import ThresholdRegistry

logger = logging.getLogger(__name__)


class GradebookSession:
    """
    One teacher's working session.

    Grade changes are persisted to the record store first; only after the
    store accepts them is the local roster mutated, the grade evaluated and
    notifications dispatched. A failed persist leaves everything untouched.

    Overlapping edits to the same student must be serialized by the caller,
    and so must a roster reload that overlaps a grade update.
    """

    def __init__(
        self,
        store: RecordStore,
        notifier: Notifier,
        registry: Optional[ThresholdRegistry] = None,
        sound: str = "default",
        reminder_hour: int = 9,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.registry = registry or ThresholdRegistry()
        self.roster = RosterCache()
        self.tracker = AverageTracker()
        self.dispatcher = NotificationDispatcher(notifier)
        self.reminders = ReminderScheduler(clock=clock, reminder_hour=reminder_hour, sound=sound)
        self.sound = sound

    # === store access ===

    async def _persist(self, action: str, call, *args):
        try:
            return await call(*args)
        except StoreFailure:
            logger.error("Store rejected %s", action)
            raise
        except Exception as e:
            logger.error("Store error during %s: %s", action, e)
            raise StoreFailure(f"Could not {action}: {e}") from e

    # === roster ===

    async def load(self) -> List[Student]:
        """Fetch every record from the store and seed the class-average baseline."""
        records = await self._persist("fetch students", self.store.fetch_all)
        try:
            students = [Student(**record) for record in records]
        except (ValidationError, TypeError) as e:
            raise StoreFailure(f"Store returned a malformed student record: {e}") from e

        self.roster.load(students)
        self.tracker.reset()
        try:
            self.tracker.recompute(self.roster.grades())
        except EmptyRoster:
            logger.info("Roster is empty; class average not seeded")
        return list(self.roster.students)

    def class_average(self) -> Optional[float]:
        try:
            return averages.class_average(self.roster.grades())
        except EmptyRoster:
            return None

    # === thresholds ===

    def thresholds(self) -> Thresholds:
        return self.registry.get()

    def set_threshold(self, band: Union[Band, str], value: str) -> Thresholds:
        return self.registry.set(band, value)

    # === grade events ===

    async def add_student(self, name: str, grade: Union[str, float]) -> GradeEvent:
        """
        Add a student with an initial grade.

        Raises:
            InvalidStudent: If the name is blank
            InvalidNumber: If the grade is not a number
            StoreFailure: If the store insert fails; nothing is changed
        """
        name = (name or "").strip()
        if not name:
            raise InvalidStudent("Please fill in both the name and the grade")
        new_grade = parse_number(grade, field="grade")

        student_id = await self._persist("add student", self.store.insert, name, new_grade)
        student = Student(id=student_id, name=name, grade=new_grade)
        self.roster.append(student)
        logger.info("Added student %s (%s) with grade %s", student.id, name, new_grade)

        return await self._grade_changed(student)

    async def update_grade(self, student_id: str, grade: Union[str, float]) -> GradeEvent:
        """
        Change one student's grade.

        Raises:
            InvalidNumber: If the grade is not a number
            NotFound: If the student is not in the roster
            StoreFailure: If the store update fails; nothing is changed
        """
        student_id = str(student_id)
        new_grade = parse_number(grade, field="grade")
        if student_id not in self.roster:
            raise NotFound(student_id)

        await self._persist("update grade", self.store.update_grade, student_id, new_grade)
        # A reload during the store call can drop the student from the roster.
        try:
            student = self.roster.patch_grade(student_id, new_grade)
        except NotFound:
            logger.error(
                "Store accepted grade %s for student %s, but the student left the roster "
                "while the update was in flight; reload to resync",
                new_grade, student_id,
            )
            raise
        logger.info("Grade for student %s set to %s", student_id, new_grade)

        return await self._grade_changed(student)

    async def _grade_changed(self, student: Student) -> GradeEvent:
        thresholds = self.registry.get()
        band = grading.classify(student.grade, thresholds)
        grade_intent = grading.evaluate(student.grade, thresholds, sound=self.sound)

        old_average = self.tracker.current
        new_average = self.tracker.recompute(self.roster.grades())
        average_intent = None
        if old_average is not None:
            average_intent = averages.check(old_average, new_average, sound=self.sound)

        delivered = await self.dispatcher.dispatch([grade_intent, average_intent])
        return GradeEvent(
            student=student,
            band=band,
            grade_intent=grade_intent,
            class_average=new_average,
            average_intent=average_intent,
            delivered=delivered,
        )

    # === reminders ===

    async def schedule_reminder(self, due_date_text: str) -> NotificationIntent:
        """
        Schedule a reminder for the day before a MM/DD/YYYY deadline.

        Raises:
            InvalidDate: If the due date is malformed; nothing is scheduled
        """
        intent = self.reminders.schedule(due_date_text)
        await self.dispatcher.dispatch([intent])
        return intent
