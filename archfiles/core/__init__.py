"""Core building blocks for the archfiles client."""
