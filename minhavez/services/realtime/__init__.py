"""Bridge between Supabase Realtime change feeds and WebSocket clients."""
