"""Application services behind the HTTP surface and the inbound pipeline."""
