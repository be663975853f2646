"""
Call forwarding orchestration.

Resolves carrier dial codes that route missed or after-hours calls to the AI
assistant number, and sequences the operator confirmation workflow against the
remote forwarding state record.
"""
