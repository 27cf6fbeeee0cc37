"""Bookings app package.

The venue booking context: the booking lifecycle, server-side pricing and
the availability ledger that guarantees no two active bookings on a venue
overlap. Reservation is a single atomic step (per-venue row lock around
the overlap check and insert, backed by a PostgreSQL exclusion constraint).
"""
