"""
High-level use cases for the adoption system.

Each service module orchestrates the repository to implement business rules
(register, log in, apply for a pet, process applications). The command line
calls these services instead of manipulating the record lists directly.
"""
