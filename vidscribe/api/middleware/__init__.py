"""Application-wide middleware and error handlers."""
