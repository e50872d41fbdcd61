"""Analytics, audience, routing and chat services used by handlers.

Handlers import services lazily so a cold start only builds the dataset when
a route first needs it.
"""

# Do NOT import services here - use lazy loading in handlers instead
