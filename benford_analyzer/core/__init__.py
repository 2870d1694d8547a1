"""Analysis engine, result model and shared infrastructure."""
