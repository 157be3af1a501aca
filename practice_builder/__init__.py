"""Practice plan builder: drafts, ordering and commit to storage."""
