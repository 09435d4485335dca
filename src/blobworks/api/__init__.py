"""REST API for blobworks."""
