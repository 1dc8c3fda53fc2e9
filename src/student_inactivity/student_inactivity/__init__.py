"""Student inactivity package.

Detects prolonged student absence across branches, moves students between
``active`` and ``inactive_by_policy``, warns students who are at risk and
reverses automated deactivations when a student shows up again.

Organized by feature modules (attendance, students, lifecycle, ...) with
Protocol repositories, MySQL implementations and a thin Flask layer.
"""
