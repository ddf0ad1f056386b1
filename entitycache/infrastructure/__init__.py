"""Infrastructure: cache backends and the system-of-record adapter."""
