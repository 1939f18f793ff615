"""Waypoint ordering service."""
