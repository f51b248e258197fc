"""
Database models package
"""
from study_tracker.models.subject import Subject
from study_tracker.models.chapter import Chapter
from study_tracker.models.topic import Topic
from study_tracker.models.task_category import TaskCategory
from study_tracker.models.task import Task
from study_tracker.models.task_tracker import TaskTracker
from study_tracker.models.day_rollover import DayRollover

__all__ = ["Subject", "Chapter", "Topic", "TaskCategory", "Task", "TaskTracker", "DayRollover"]
