"""HTTP play service for the Guiñote engine."""
