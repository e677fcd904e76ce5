"""Real-time delivery — channel registry + WebSocket gateway.

Events flow one way:
1. IngressService → ChannelRegistry.publish(code, compliment)
2. ChannelRegistry → every connection in that code's room → WebSocket client

Delivery is best-effort. A recipient who was not connected when a
compliment arrived picks it up from GET /api/compliments/{code}.
"""
