"""Failures raised by the service layer.

Each error carries a stable ``kind`` that callers can branch on; the message is
meant for display.
"""

from __future__ import annotations


class StaffTrackerError(Exception):
    kind = "Error"
    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmailError(StaffTrackerError):
    kind = "DuplicateEmail"
    default_message = "Employee with this email already exists"


class EmployeeNotFoundError(StaffTrackerError):
    kind = "EmployeeNotFound"
    default_message = "Employee not found"


class TaskNotFoundError(StaffTrackerError):
    kind = "TaskNotFound"
    default_message = "Task not found"


class DepartmentNotFoundError(StaffTrackerError):
    kind = "DepartmentNotFound"
    default_message = "Department not found"


class DuplicateDepartmentError(StaffTrackerError):
    kind = "DuplicateDepartment"
    default_message = "Department with this name already exists"


class UnknownOperationError(StaffTrackerError):
    kind = "UnknownOperation"
    default_message = "Unknown operation"


class InvalidArgumentError(StaffTrackerError):
    kind = "InvalidArgument"
    default_message = "Invalid argument"
