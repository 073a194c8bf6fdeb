"""Transport, mapping, pagination, query and event-stream internals."""
