"""Loading of the JSON extracts.

Downloads extracts when a remote location is configured, reads them from the
data directory and validates every record against its dataset model before
any aggregation sees it.
"""
