"""Staff tracker backend: employees, departments and tasks with live queries."""
