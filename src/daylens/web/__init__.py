"""HTTP surface for reflection analysis and feedback."""
