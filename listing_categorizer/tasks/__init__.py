"""Queue tasks for the arq worker."""
