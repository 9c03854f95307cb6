import bisect
from dataclasses import dataclass
from typing import List, Tuple

from .config import GRAPH_BAR_LEN, GRAPH_ROWS
from .errors import NothingToRender

# Steps of the linear scales, from the smallest to the largest. The
# auto detection only moves to the right.
LINEAR_STEPS = (1, 5, 50)

def power_of_two_scale(rows=GRAPH_ROWS):
    return tuple(2**j for j in range(rows))

def linear_scale(step, rows=GRAPH_ROWS):
    return tuple((j+1) * step for j in range(rows))

def linear_auto_step(samples, rows=GRAPH_ROWS):
    ''' Pick the smallest linear step that makes sense for the samples.

        Start with step 1; a sample larger than 1*rows escalates to step 5
        and, once there, a sample larger than 5*rows escalates to step 50.
    '''
    small, med, large = LINEAR_STEPS
    step = small
    for sz in samples:
        if step == small and sz > small * rows:
            step = med
        if step == med and sz > med * rows:
            step = large
            break # there is no scale bigger than this.

    return step

def select_scale(samples, logscale, rows=GRAPH_ROWS):
    if logscale:
        return power_of_two_scale(rows)
    return linear_scale(linear_auto_step(samples, rows), rows)

def bucket_index(scale, value):
    ''' Index of the first threshold greater or equal than value.

        The last bucket has no upper bound: it takes anything larger
        than the second-to-last threshold.
    '''
    return bisect.bisect_left(scale, value, 0, len(scale) - 1)

def frequency_table(scale, samples):
    freq = [0] * len(scale)
    for sz in samples:
        freq[bucket_index(scale, sz)] += 1
    return freq


@dataclass
class HistogramRow:
    label : str
    bar : str
    frequency : int
    percentage : float

    def as_line(self):
        return "%-13s |%s (%.2f%%)" % (self.label, self.bar, self.percentage)


@dataclass
class Histogram:
    scale : Tuple[int, ...]
    freq : List[int]

    @classmethod
    def build(cls, samples, logscale=False, rows=GRAPH_ROWS):
        scale = select_scale(samples, logscale, rows)
        return cls(scale, frequency_table(scale, samples))

    @property
    def total(self):
        return sum(self.freq)

    @property
    def high(self):
        ''' Highest bucket with a non-zero frequency (0 if all are empty). '''
        for high in range(len(self.freq) - 1, 0, -1):
            if self.freq[high]:
                return high
        return 0

    def rows(self, bar_len=GRAPH_BAR_LEN):
        ''' Render the buckets up to the highest non-empty one.

            Raise NothingToRender if there are no samples at all.
        '''
        high = self.high
        retained = self.freq[:high+1]

        max_freq = max(retained)
        total = sum(retained)
        if max_freq == 0 or total == 0:
            raise NothingToRender()

        ret = []
        for j, freq in enumerate(retained):
            if j != high or high == 0:
                label = "<= %d" % self.scale[j]
            else:
                label = ">  %d" % self.scale[j-1]

            bar = '-' * ((freq * bar_len) // max_freq)
            ret.append(HistogramRow(label, bar, freq, (freq * 100) / total))

        return ret
