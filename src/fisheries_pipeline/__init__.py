"""fisheries_pipeline package.

Contains modules for exporting fisheries-monitoring collections from MongoDB
into flat JSON extracts, loading and validating those extracts, and turning
the records into display-ready series for a Streamlit dashboard.

Architecture:
- MongoDB collections → JSON extracts under ``DATA_DIR``
- Pydantic models validate records at the load boundary
- Pure aggregation functions (filter, group, summarize, bucket, normalize,
  convert) produce the chart series
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
