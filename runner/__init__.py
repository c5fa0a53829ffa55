"""Smoke runner driving a live return-URL server over HTTP."""
