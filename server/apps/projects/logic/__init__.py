"""Business logic layer for projects app.

- Project CRUD
- Version CRUD scoped to a project
- Attaching files to versions and detaching them again
"""
