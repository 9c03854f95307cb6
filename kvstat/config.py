from dataclasses import dataclass
from typing import Optional

STATS = ('overview', 'vmstat', 'vmpage', 'ondisk-size', 'latency')

# One bit of RAM per page in the swap file: the page count is the fixed
# budget, only the page size is free to change.
VMPAGE_PAGES = 1000000
VMPAGE_MIN_PAGE_SIZE = 8
VMPAGE_MAX_PAGE_SIZE = 1024 * 64
VMPAGE_PLACE_ATTEMPTS = 200

GRAPH_ROWS = 20
GRAPH_BAR_LEN = 50

@dataclass(frozen=True)
class Config:
    stat : str = 'overview'

    host : str = '127.0.0.1'
    port : int = 6379
    auth : Optional[str] = None
    db : int = 0

    delay : int = 1000          # milliseconds
    count : Optional[int] = None  # iterations of the polling reports, None is forever

    samplesize : int = 10000
    retry_budget : Optional[int] = None  # discarded draws, None means max(100, 10 * samplesize)
    logscale : bool = False

    pages : int = VMPAGE_PAGES
    min_page_size : int = VMPAGE_MIN_PAGE_SIZE
    max_page_size : int = VMPAGE_MAX_PAGE_SIZE
    place_attempts : int = VMPAGE_PLACE_ATTEMPTS

    seed : Optional[int] = None
    show_progress : bool = True

    def __post_init__(self):
        if self.stat not in STATS:
            raise ValueError(f"Unknown stat '{self.stat}', expected one of {STATS}")
        if self.samplesize <= 0:
            raise ValueError(f"samplesize must be positive, got {self.samplesize}")
        if self.pages <= 0:
            raise ValueError(f"pages must be positive, got {self.pages}")
        if not (0 < self.min_page_size <= self.max_page_size):
            raise ValueError(f"Invalid page size range [{self.min_page_size}, {self.max_page_size}]")
        if self.place_attempts <= 0:
            raise ValueError(f"place_attempts must be positive, got {self.place_attempts}")
        if self.retry_budget is not None and self.retry_budget < 0:
            raise ValueError(f"retry_budget cannot be negative, got {self.retry_budget}")

    @property
    def max_discarded_draws(self):
        if self.retry_budget is not None:
            return self.retry_budget
        return max(100, 10 * self.samplesize)

    def page_sizes(self):
        ''' Candidate page sizes: a doubling series from min_page_size up to
            max_page_size (inclusive).
        '''
        pagesize = self.min_page_size
        while pagesize <= self.max_page_size:
            yield pagesize
            pagesize *= 2
