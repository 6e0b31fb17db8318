"""Optional storage integrations."""
