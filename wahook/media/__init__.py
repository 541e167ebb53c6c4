"""MIME type resolution for inbound and outbound media."""
