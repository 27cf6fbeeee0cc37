"""
Shared Kernel

Base classes and utilities shared by the venue and booking contexts:
domain building blocks, value objects and the application plumbing
(unit of work, message bus, retry policy).
"""
