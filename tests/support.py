"""Shared test doubles."""


class DummyRng:
    """Deterministic stand-in for random.Random.

    random() returns the fixed value, randint() the upper bound unless told
    otherwise, choice() the first element.
    """
    def __init__(self, value=0.5, randint_value=None):
        self.value = value
        self.randint_value = randint_value
        self.randint_calls = []

    def random(self):
        return self.value

    def randint(self, a, b):
        self.randint_calls.append((a, b))
        return b if self.randint_value is None else self.randint_value

    def choice(self, seq):
        return seq[0]


class ScriptedRng(DummyRng):
    """DummyRng whose random() walks a fixed list before falling back to value."""
    def __init__(self, values, value=0.5, randint_value=None):
        super().__init__(value, randint_value)
        self.values = list(values)

    def random(self):
        return self.values.pop(0) if self.values else self.value
