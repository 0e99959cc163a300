"""Domain records and validation rules, free of persistence concerns."""
