"""entitycache: read-through field cache between a system of record and cache backends."""
