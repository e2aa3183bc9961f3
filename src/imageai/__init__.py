"""Template management and image processing backend."""
