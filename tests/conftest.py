import os

# no display while testing the plots
os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from kvstat.errors import StoreError
from kvstat.store import Store

class ScriptedRandom:
    ''' Random source that returns the scripted values first and then
        <default> forever. Counts the calls made.
    '''
    def __init__(self, values, default=0):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def randrange(self, stop):
        self.calls += 1
        val = self.values.pop(0) if self.values else self.default
        assert 0 <= val < stop
        return val


class FakeStore(Store):
    ''' Returns the scripted lengths in order, one key per length.

        A length that is an exception instance is raised instead.
    '''
    def __init__(self, lengths=(), empty=False, infos=()):
        self.lengths = list(lengths)
        self.empty = empty
        self.infos = list(infos)
        self.pings = 0
        self.next_key = 0

    def random_key(self):
        if self.empty:
            return None
        self.next_key += 1
        return f"key:{self.next_key}"

    def serialized_length(self, key):
        sl = self.lengths.pop(0) if self.lengths else 0
        if isinstance(sl, Exception):
            raise sl
        return sl

    def info(self):
        if not self.infos:
            raise StoreError("no more INFO replies")
        return self.infos.pop(0)

    def ping(self):
        self.pings += 1
        return True


@pytest.fixture
def scripted_random():
    return ScriptedRandom

@pytest.fixture
def fake_store():
    return FakeStore

@pytest.fixture
def sizes_csv(tmp_path):
    fname = tmp_path / "sizes.csv"
    lines = ["key,size"] + [f"k{i},{sz}" for i, sz in enumerate([12, 40, 7, 300, 25, 1800, 64, 90, 3, 512])]
    fname.write_text("\n".join(lines) + "\n")
    return str(fname)
