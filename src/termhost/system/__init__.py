"""External collaborators of a terminal session.

The process table, filesystem, extension registry and command
interpreter interfaces, plus reference implementations and the session
host that ties them to controllers.
"""
