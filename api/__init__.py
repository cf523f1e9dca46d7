"""HTTP API for uploading incidents and reading map clusters."""
