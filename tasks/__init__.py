"""
tasks — Per-user task management.

Provides:
  • ``TaskService`` — ownership-scoped CRUD, listing and status toggling
  • Task API routes mounted under ``/tasks``
"""
