"""Event statistics: interval sizing, query building, aggregation and assembly."""
