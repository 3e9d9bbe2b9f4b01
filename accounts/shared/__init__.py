"""
Shared kernel: configuration, error vocabulary, security, database
infrastructure and logging used by the account modules.
"""
