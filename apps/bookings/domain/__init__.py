"""Pure availability and calendar logic, free of ORM access."""
