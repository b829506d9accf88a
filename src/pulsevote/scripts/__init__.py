"""Operational entry points (cron jobs and maintenance commands)."""
