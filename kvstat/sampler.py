from dataclasses import dataclass
from typing import Tuple

import numpy as np
import tqdm

from .errors import EmptyDataset, SamplingExhausted

@dataclass(frozen=True)
class SampleSet:
    values : Tuple[int, ...]
    discarded : int = 0

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, ix):
        return self.values[ix]

    @property
    def mean(self):
        if not self.values:
            return 0.0
        return float(np.mean(self.values))

    @property
    def stddev(self):
        ''' Population standard deviation (divided by N, not N-1). '''
        if not self.values:
            return 0.0
        return float(np.std(self.values, ddof=0))


class Sampler:
    def __init__(self, store, max_discarded, db=0, show_progress=False):
        assert max_discarded >= 0
        self.store = store
        self.max_discarded = max_discarded
        self.db = db
        self.show_progress = show_progress

    def collect(self, n):
        ''' Sample the serialized length of n random keys.

            Keys with a zero or unknown length are not counted and another
            key is drawn instead. If more than max_discarded draws are
            thrown away, give up with SamplingExhausted.

            EmptyDataset and StoreError are propagated: without data there
            is no report to do.
        '''
        assert n > 0
        samples = []
        discarded = 0

        with tqdm.tqdm(total=n, disable=not self.show_progress, leave=False) as T:
            while len(samples) < n:
                key = self.store.random_key()
                if key is None:
                    raise EmptyDataset(self.db)

                sl = self.store.serialized_length(key)
                if sl is None or sl <= 0:
                    # problem getting the length of this object, don't
                    # count this try
                    discarded += 1
                    if discarded > self.max_discarded:
                        raise SamplingExhausted(len(samples), n, discarded)
                    continue

                samples.append(int(sl))
                T.update()

        assert len(samples) == n
        return SampleSet(tuple(samples), discarded)
