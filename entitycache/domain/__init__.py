"""Domain: entity configuration, cache load results, and the error taxonomy.

Independent of any cache or database backend.
"""
