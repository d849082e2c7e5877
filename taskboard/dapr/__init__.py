"""Outbound event publishing through the Dapr sidecar."""
