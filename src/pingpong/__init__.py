"""TCP ping-pong: two endpoints taking strict turns over one stream.

The initiator listens, works, and sends PING; the responder connects, waits
for PING, works, and answers PONG. Delivery order on the stream is the only
synchronization between the two roles.
"""

__all__ = []
