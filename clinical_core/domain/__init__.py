"""Input records and output payloads."""
