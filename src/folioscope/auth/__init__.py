"""Authentication, session state and access control."""
