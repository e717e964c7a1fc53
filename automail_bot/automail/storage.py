"""
Storage for auto-mail schedules.
Defines the store interface and a JSON file implementation.
"""

import json
import os
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from loguru import logger

from .errors import ScheduleNotFound, StorageError
from .models import AutoMailSchedule


class ScheduleStore(ABC):
    """CRUD interface over persisted schedules"""

    @abstractmethod
    def list(self) -> List[AutoMailSchedule]:
        """Return every stored schedule"""

    @abstractmethod
    def get(self, schedule_id: str) -> Optional[AutoMailSchedule]:
        """Return the schedule with the given id, or None"""

    @abstractmethod
    def upsert(self, schedule: AutoMailSchedule) -> AutoMailSchedule:
        """Insert a schedule, or replace it when its id is already stored"""

    @abstractmethod
    def update(self, schedule_id: str, schedule: AutoMailSchedule) -> AutoMailSchedule:
        """Replace the stored schedule with the given id"""

    @abstractmethod
    def delete(self, schedule_id: str) -> None:
        """Remove the stored schedule with the given id"""


class JsonScheduleStore(ScheduleStore):
    """Schedule store backed by a JSON file"""

    def __init__(self, file_path: str = "automail_schedules.json"):
        """
        Initialize schedule storage.

        Args:
            file_path: Path to the schedules file
        """
        self.file_path = file_path
        self.schedules: Dict[str, AutoMailSchedule] = {}
        self._lock = threading.Lock()
        logger.debug(f"Initialized JsonScheduleStore with file: {file_path}")

    def load(self) -> bool:
        """
        Load schedules from file.

        Returns:
            Whether loading was successful
        """
        if not os.path.exists(self.file_path):
            logger.info("No schedules file found, starting empty")
            return False

        try:
            with open(self.file_path, "r") as f:
                data = json.load(f)

            schedules = {}
            for record in data:
                schedule = AutoMailSchedule.from_dict(record)
                schedules[schedule.id] = schedule

            with self._lock:
                self.schedules = schedules

            logger.info(f"Loaded {len(schedules)} auto-mail schedules")
            return True

        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading auto-mail schedules: {e}")
            return False

    def save(self) -> bool:
        """
        Save schedules to file.

        Returns:
            Whether saving was successful
        """
        with self._lock:
            return self._write(self.schedules)

    def _write(self, schedules: Dict[str, AutoMailSchedule]) -> bool:
        """Write schedules through a temporary file; caller holds the lock"""
        data = [schedule.to_dict() for schedule in schedules.values()]
        tmp_path = f"{self.file_path}.tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.file_path)
            logger.debug(f"Saved {len(data)} auto-mail schedules")
            return True

        except OSError as e:
            logger.error(f"Error saving auto-mail schedules: {e}")
            return False

        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as e:
                    logger.warning(f"Could not remove {tmp_path}: {e}")

    def _commit(self, schedules: Dict[str, AutoMailSchedule]) -> None:
        """Persist schedules, then make them current; caller holds the lock"""
        if not self._write(schedules):
            raise StorageError(f"Could not write auto-mail schedules to {self.file_path}")
        self.schedules = schedules

    def list(self) -> List[AutoMailSchedule]:
        with self._lock:
            return list(self.schedules.values())

    def get(self, schedule_id: str) -> Optional[AutoMailSchedule]:
        with self._lock:
            return self.schedules.get(schedule_id)

    def upsert(self, schedule: AutoMailSchedule) -> AutoMailSchedule:
        """
        Insert or replace a schedule.

        Args:
            schedule: Canonical schedule; a new id is assigned if it has none

        Returns:
            The stored schedule

        Raises:
            StorageError: If the file could not be written; nothing is changed
        """
        if not schedule.id:
            schedule = schedule.with_id(uuid.uuid4().hex)

        with self._lock:
            created = schedule.id not in self.schedules
            schedules = dict(self.schedules)
            schedules[schedule.id] = schedule
            self._commit(schedules)

        logger.info(f"{'Created' if created else 'Replaced'} auto-mail schedule {schedule.id}")
        return schedule

    def update(self, schedule_id: str, schedule: AutoMailSchedule) -> AutoMailSchedule:
        """
        Replace an existing schedule.

        Args:
            schedule_id: Id of the stored schedule
            schedule: Canonical replacement

        Returns:
            The stored schedule

        Raises:
            ScheduleNotFound: If no schedule has that id
            StorageError: If the file could not be written
        """
        schedule = schedule.with_id(schedule_id)
        with self._lock:
            if schedule_id not in self.schedules:
                raise ScheduleNotFound(schedule_id)
            schedules = dict(self.schedules)
            schedules[schedule_id] = schedule
            self._commit(schedules)

        logger.info(f"Updated auto-mail schedule {schedule_id}")
        return schedule

    def delete(self, schedule_id: str) -> None:
        with self._lock:
            if schedule_id not in self.schedules:
                raise ScheduleNotFound(schedule_id)
            schedules = dict(self.schedules)
            del schedules[schedule_id]
            self._commit(schedules)

        logger.info(f"Deleted auto-mail schedule {schedule_id}")
