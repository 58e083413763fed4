"""Player entry alert service."""
