"""Venues app package.

The venue catalog: venues, their owners, capacity and the pricing rules
the booking context reads when it quotes a reservation. From the booking
context's point of view the catalog is read-only.
"""
