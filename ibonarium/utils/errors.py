# ibonarium/utils/errors.py


class IbonariumError(RuntimeError):
    """Base class for every error raised by the layer engine."""


class UserInputError(IbonariumError):
    """
    Raised for invalid user-provided config (seed, durations, paths).
    Should NOT print traceback.
    """


class TransientSyncFailure(IbonariumError):
    """
    External provider unreachable, timed out or returned a malformed payload.

    Recovered locally by ExternalSync: logged, never propagated.
    """

    def __init__(self, category: str, reason: str):
        super().__init__(f"{category} sync failed: {reason}")
        self.category = category
        self.reason = reason


class InvariantViolation(IbonariumError):
    """
    A computed field became non-finite (or left its clamp range).

    Fatal programming error in the coupling function; never swallowed.
    """

    def __init__(self, fields: list[str]):
        super().__init__(f"invariant violated for fields: {', '.join(fields)}")
        self.fields = list(fields)


class StoreClosedError(IbonariumError):
    """StateStore.update() called after the store was disposed."""
