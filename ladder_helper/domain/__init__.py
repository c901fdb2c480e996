"""Domain layer (pure logic).

- Keep game rules and calculations here.
- Avoid I/O: no DB sessions, no Telegram, no Redis.
- Randomness is passed in as an argument (numpy Generator or compatible).
"""
