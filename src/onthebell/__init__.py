"""OnTheBell community moderation service."""
