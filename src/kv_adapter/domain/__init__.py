"""Domain layer: criteria, records, counters and schema handling."""
