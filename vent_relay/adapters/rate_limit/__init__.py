"""Rate limiting adapters.

The relay keeps its rate-limit table in process memory. The abstraction lets
the HTTP layer depend on an interface rather than the concrete table.
"""
