"""
Services package for the MinhaVez backend.

Business logic organized by domain:
- queue: ranks, wait estimates, status transitions, availability
- realtime: Supabase Realtime subscriptions and watchers
- notifications: the "you were called" effect on the customer's device
- reservations: reservation lifecycle, public booking slots
- websocket: live dashboard connections
"""
