from app.models.org import Department, Employee
from app.models.work import Task

__all__ = [
    "Department",
    "Employee",
    "Task",
]
