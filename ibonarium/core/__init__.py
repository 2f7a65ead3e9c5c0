"""
Core Layer Model

Defines WHAT the lab's world is, independent of any cadence, feed or sink.

Invariants:
- LayerState is owned by exactly one StateStore; no module-level instance.
- StateStore.update() is the only way a field changes.
- Readers only ever receive LayerSnapshot (frozen).
- Randomness always comes from an injected RandomSource.

Core explicitly does NOT:
- Perform network IO
- Clamp or validate values on write (callers do)
- Decide when time advances

Time advancement is always external (see ibonarium.runtime.scheduler).
"""
