"""Task Manager API: a small FastAPI + PostgreSQL task tracker."""
