"""HTTP API for the fulfillment engine."""
