"""Domain layer: result types, the error taxonomy and the SQL dump routines."""
