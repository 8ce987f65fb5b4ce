"""HTTP API for the OnTheBell application."""
