"""
owlauth - Desktop client authentication state

Tracks whether the user has supplied a valid API key and given consent,
and answers the "may this user reach protected features?" question for
the rest of the application.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- auth: Credential/consent state machine and identity validation
- storage: Durable credential persistence abstraction
"""

__version__ = "1.0.0"
