"""Operational scripts for the OnTheBell service."""
