"""Export of MongoDB collections into the JSON extracts the dashboard reads."""
