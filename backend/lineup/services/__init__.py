"""
Services Layer

Engine logic for team formation and match scheduling:
- team_assigner / schedule_generator are pure (no session, rng passed in)
- tournament_state owns batch versioning and is the only writer
- tournament_store is the persistence port used by tournament_state
- Nothing here depends on HTTP request/response objects
"""
