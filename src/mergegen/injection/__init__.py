"""Injection templates — regex-located patches into existing files.

An ``.inj`` template does not produce a file of its own. It patches the
sibling output that shares its base name (``main.cpp.inj`` patches
``main.cpp``) with one or more blocks of the form:

    <!-- injection-pattern: register-handler -->
    (?P<injection>// handlers\\n)
    <!-- injection-string-start -->
    register(my_handler);
    <!-- injection-string-end -->

The regex must match the target exactly once; the payload is inserted right
after the text captured by the ``injection`` group. Re-applying a block whose
payload is already in place changes nothing.
"""

from __future__ import annotations

PATTERN_MARKER = "injection-pattern"
STRING_START = "<!-- injection-string-start -->"
STRING_END = "<!-- injection-string-end -->"
INJECTION_GROUP = "injection"
