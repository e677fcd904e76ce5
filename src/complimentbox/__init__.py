"""complimentbox — anonymous compliments delivered in real time.

A recipient shares a short code; senders POST compliments tagged with it.
Every compliment is stored durably and pushed live to whoever is watching
that code's room over a WebSocket.
"""

__version__ = "0.1.0"
