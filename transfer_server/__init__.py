"""Transfer booking backend: flight lookup and pickup/drop-off time checks."""
