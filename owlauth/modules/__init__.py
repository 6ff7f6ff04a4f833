"""
owlauth Modules

- auth: state manager, identity validator, factory
- storage: file, Redis and in-memory credential stores

Modules talk to each other only through the protocols in auth.interfaces.
"""
