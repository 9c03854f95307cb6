'''
Guess the best swap file page size for a dataset.

We use a fixed amount of pages of different sizes and simulate adding
data with sizes sampled from the real dataset, placing each object at a
random offset. While doing this we take stats about how efficiently the
swap file is used with every given page size. The best one wins.

Why is the number of pages the thing that is fixed? The server uses one
bit of RAM for every page in the swap file, so we want to optimize the
page size while the number of pages is taken as constant.
'''
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .config import VMPAGE_PAGES, VMPAGE_PLACE_ATTEMPTS

class PageBitmap:
    FREE = 0
    USED = 1

    def __init__(self, total_pages):
        assert total_pages > 0
        self.pages = bytearray(total_pages)
        self.used_pages = 0

    def __len__(self):
        return len(self.pages)

    def __iter__(self):
        return iter(self.pages)

    def is_free(self, off, cnt):
        assert 0 <= off and off + cnt <= len(self.pages)
        return self.pages.find(self.USED, off, off + cnt) == -1

    def occupy(self, off, cnt):
        assert self.is_free(off, cnt)
        self.pages[off:off+cnt] = bytes([self.USED]) * cnt
        self.used_pages += cnt

        assert self.used_pages <= len(self.pages)

    def try_place(self, cnt, rnd, attempts):
        ''' Try to find a run of cnt free pages starting at a random
            offset, up to <attempts> times. Occupy and return the offset
            of the first run found or None if every attempt failed.
        '''
        assert cnt > 0
        last_off = len(self.pages) - cnt
        if last_off < 0:
            # the object is larger than the whole swap file
            return None

        for _ in range(attempts):
            off = rnd.randrange(last_off + 1)
            if self.is_free(off, cnt):
                self.occupy(off, cnt)
                return off

        return None


@dataclass
class SimulationResult:
    page_size : int
    total_pages : int
    stored_bytes : int = 0
    used_pages : int = 0
    draws : int = 0

    @property
    def density(self):
        ''' Bytes per page: average payload per page slot
            across the fixed page budget.
        '''
        return self.stored_bytes / self.total_pages

    @property
    def space_efficiency(self):
        ''' Percentage of the swap file bytes used by payload. '''
        return (self.stored_bytes * 100) / (self.total_pages * self.page_size)

    @property
    def score(self):
        return self.density * self.space_efficiency


@dataclass
class Recommendation:
    results : List[SimulationResult] = field(default_factory=list)
    best : Optional[SimulationResult] = None

    def add(self, result):
        self.results.append(result)

        # strictly better: on ties the smaller (first) page size wins
        if self.best is None or self.best.score < result.score:
            self.best = result

    @property
    def best_page_size(self):
        return self.best.page_size if self.best else None


class VMPageSimulator:
    def __init__(self, samples, total_pages=VMPAGE_PAGES, rnd=None, place_attempts=VMPAGE_PLACE_ATTEMPTS):
        if not len(samples):
            raise ValueError("Cannot simulate without samples")
        if any(sz <= 0 for sz in samples):
            # zero sized objects are always placed: the trial would never end
            raise ValueError("Samples must be positive sizes")
        assert total_pages > 0 and place_attempts > 0

        self.samples = samples
        self.total_pages = total_pages
        self.rnd = rnd if rnd is not None else random.Random()
        self.place_attempts = place_attempts

    def trial(self, page_size):
        ''' Fill a fresh swap file of page_size pages with random samples
            until an object cannot be placed after place_attempts tries.

            Return the stats of the trial and the final bitmap.
        '''
        assert page_size > 0
        bitmap = PageBitmap(self.total_pages)
        result = SimulationResult(page_size=page_size, total_pages=self.total_pages)

        N = len(self.samples)
        while True:
            bytes_needed = self.samples[self.rnd.randrange(N)]
            pages_needed = (bytes_needed + (page_size - 1)) // page_size
            result.draws += 1

            off = bitmap.try_place(pages_needed, self.rnd, self.place_attempts)
            if off is None:
                # the swap file is considered full for this page size
                break

            result.used_pages += pages_needed
            result.stored_bytes += bytes_needed

        assert result.used_pages == bitmap.used_pages <= self.total_pages
        assert result.stored_bytes <= result.used_pages * page_size
        return result, bitmap

    def iter_trials(self, page_sizes):
        for page_size in page_sizes:
            yield self.trial(page_size)

    def recommend(self, page_sizes, on_trial=None):
        ''' Run one trial per page size and return the Recommendation.

            If given, on_trial(result, bitmap) is called after each trial;
            the bitmap is discarded afterwards.
        '''
        rec = Recommendation()
        for result, bitmap in self.iter_trials(page_sizes):
            if on_trial is not None:
                on_trial(result, bitmap)
            rec.add(result)

        return rec
