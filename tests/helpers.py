class RacingCollection:
    """A collection whose existence check always misses, as when two
    requests interleave between the check and the insert."""

    def __init__(self, inner):
        self.inner = inner

    def find_one(self, *args, **kwargs):
        return None

    def __getattr__(self, name):
        return getattr(self.inner, name)
