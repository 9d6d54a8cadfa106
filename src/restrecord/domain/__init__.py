"""Domain layer: records, schemas, validation and persistence."""
