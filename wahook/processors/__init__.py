"""Event classification and webhook payload construction."""
