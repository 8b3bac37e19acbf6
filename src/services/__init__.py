"""Business logic used by handlers.

Nothing here touches the network; store access lives in repositories.
"""
