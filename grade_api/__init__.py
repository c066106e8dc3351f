"""Document readability grading API."""
