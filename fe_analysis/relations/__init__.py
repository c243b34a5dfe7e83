"""Feature relations derived from presence conditions."""
