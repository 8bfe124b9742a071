"""Domain layer: records, tables, indexes, queries and transactions."""
