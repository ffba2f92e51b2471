"""Variable bindings for a xod session. There is a single flat scope: if/while/for blocks read and write the same
Environment as the top level.
"""

from xod.lang.error import UndefinedVariable


class Environment:
    """Mapping of variable name to value. Owned by a Session and passed to each Evaluator."""

    def __init__(self, bindings=None):
        self._bindings = dict(bindings) if bindings else {}

    def lookup(self, name, start=0, end=-1):
        try:
            return self._bindings[name]
        except KeyError:
            raise UndefinedVariable(name, start, end) from None

    def bind(self, name, value):
        self._bindings[name] = value

    @property
    def bindings(self):
        """Copy of the current bindings."""
        return dict(self._bindings)

    def __contains__(self, name):
        return name in self._bindings

    def __len__(self):
        return len(self._bindings)

    def __repr__(self):
        return f"Environment({self._bindings!r})"
