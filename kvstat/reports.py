import itertools
import time

import tqdm

from .errors import NothingToRender, StoreError
from .histogram import Histogram
from .sampler import Sampler
from .vmpage import VMPageSimulator

HEADER_EVERY = 20
MAX_DBS = 20

def bytes_to_human(n):
    sign = '-' if n < 0 else ''
    n = abs(n)
    if n < 1024:
        return f"{sign}{n}B"
    elif n < 1024**2:
        return f"{sign}{n / 1024:.2f}K"
    elif n < 1024**3:
        return f"{sign}{n / 1024**2:.2f}M"
    else:
        return f"{sign}{n / 1024**3:.2f}G"

def delta_sign(delta):
    if delta == 0:
        return ' '
    return '+' if delta > 0 else ''

def iterations(count):
    return itertools.count() if count is None else range(count)

def info_long(info, field, default=None):
    val = info.get(field)
    if val is None:
        return default
    return int(val)

# ---- Sampling based reports --------------------------------------------

def sample_dataset(cfg, store):
    print(f"Sampling {cfg.samplesize} random keys from DB {cfg.db}...")
    sampler = Sampler(store, cfg.max_discarded_draws, db=cfg.db, show_progress=cfg.show_progress)
    samples = sampler.collect(cfg.samplesize)

    print(f"  Count: {len(samples)}")
    print(f"  Average: {samples.mean:.2f}")
    print(f"  Standard deviation: {samples.stddev:.2f}")
    print()
    return samples

def trial_line(result):
    return (f"{result.page_size}: "
            f"bytes per page: {result.density:.2f}, "
            f"space efficiency: {result.space_efficiency:.2f}%")

def vmpage(cfg, store, rnd, save_maps=None):
    samples = sample_dataset(cfg, store)

    print("Simulate fragmentation with different page sizes...")
    sim = VMPageSimulator(samples, total_pages=cfg.pages, rnd=rnd, place_attempts=cfg.place_attempts)

    page_sizes = list(cfg.page_sizes())
    with tqdm.tqdm(total=len(page_sizes), disable=not cfg.show_progress, leave=False) as T:
        def on_trial(result, bitmap):
            T.update()
            print(trial_line(result))
            if save_maps:
                from .maps import save_bitmap_map
                save_bitmap_map(bitmap, result.page_size, save_maps)

        rec = sim.recommend(page_sizes, on_trial=on_trial)

    print()
    print(f"The best compromise between bytes per page and swap file size: {rec.best_page_size}")
    return rec

def ondisk_size(cfg, store, save_plot=None):
    samples = sample_dataset(cfg, store)
    histogram = Histogram.build(samples, logscale=cfg.logscale)

    try:
        rows = histogram.rows()
    except NothingToRender as err:
        print(err)
        return histogram

    for row in rows:
        print(row.as_line())

    if save_plot:
        from .plotting import plot_histogram
        plot_histogram(histogram, save_plot)

    return histogram

# ---- Polling reports ---------------------------------------------------

OVERVIEW_HEADER = (
" ------- data ------ ------------ load ----------------------------- - childs -",
" keys      used-mem  clients blpops  requests            connections",
)

def child_marker(info):
    # field names changed between server versions
    bgsave = info_long(info, 'bgsave_in_progress', info_long(info, 'rdb_bgsave_in_progress', 0))
    aofrewrite = info_long(info, 'bgrewriteaof_in_progress', info_long(info, 'aof_rewrite_in_progress', 0))

    return {
            (0, 0): '',
            (1, 0): 'BGSAVE',
            (0, 1): 'AOFREWRITE',
            (1, 1): 'BGSAVE+AOF',
            }[(bool(bgsave), bool(aofrewrite))]

def overview_line(info, prev_requests):
    keys = 0
    for j in range(MAX_DBS):
        db = info.get(f"db{j}")
        if db:
            keys += int(db.get('keys', 0))

    requests = info_long(info, 'total_commands_processed', 0)

    line = " %-10s" % keys
    line += "%-9s" % bytes_to_human(info_long(info, 'used_memory', 0))
    line += " %-8s" % info_long(info, 'connected_clients', 0)
    line += "%-8s" % info_long(info, 'blocked_clients', 0)
    line += "%-19s" % f"{requests} (+{requests - prev_requests})"
    line += " %-12s" % info_long(info, 'total_connections_received', 0)
    line += child_marker(info)

    return line, requests

def overview(cfg, store):
    requests = 0
    for c in iterations(cfg.count):
        info = store.info()
        if c % HEADER_EVERY == 0:
            print(*OVERVIEW_HEADER, sep='\n')

        line, requests = overview_line(info, requests)
        print(line)
        time.sleep(cfg.delay / 1000)

VMSTAT_HEADER = (
" --------------- objects --------------- ------ pages ------ ----- memory -----",
" load-in  swap-out  swapped   delta      used     delta      used     delta    ",
)

VMSTAT_FIELDS = (
        'vm_stats_swappin_count',
        'vm_stats_swappout_count',
        'vm_stats_swapped_objects',
        'vm_stats_used_pages',
        'used_memory',
        )

def vmstat_line(info, prev):
    ''' Format one vmstat line. prev holds the counters of the previous
        line (all 0 for the first one); return the line and the
        counters to use the next time.
    '''
    cur = {}
    for field in VMSTAT_FIELDS:
        val = info_long(info, field)
        if val is None:
            raise StoreError("Redis instance has VM disabled?")
        cur[field] = val

    pagein = cur['vm_stats_swappin_count'] - prev['vm_stats_swappin_count']
    pageout = cur['vm_stats_swappout_count'] - prev['vm_stats_swappout_count']
    swapped = cur['vm_stats_swapped_objects']
    swapped_delta = swapped - prev['vm_stats_swapped_objects']
    used_pages = cur['vm_stats_used_pages']
    used_pages_delta = used_pages - prev['vm_stats_used_pages']
    used_memory = cur['used_memory']
    used_memory_delta = used_memory - prev['used_memory']

    line = " %-9s" % pagein
    line += "%-9s" % pageout
    line += " %-10s" % swapped
    line += delta_sign(swapped_delta) + "%-10s" % swapped_delta
    line += "%-9s" % used_pages
    line += delta_sign(used_pages_delta) + "%-9s" % used_pages_delta
    line += " %-9s" % bytes_to_human(used_memory)
    line += delta_sign(used_memory_delta) + "%-9s" % bytes_to_human(used_memory_delta)

    return line, cur

def vmstat(cfg, store):
    prev = {field: 0 for field in VMSTAT_FIELDS}
    for c in iterations(cfg.count):
        info = store.info()
        if c % HEADER_EVERY == 0:
            print(*VMSTAT_HEADER, sep='\n')

        line, prev = vmstat_line(info, prev)
        print(line)
        time.sleep(cfg.delay / 1000)

def latency(cfg, store):
    for seq in iterations(cfg.count):
        start = time.perf_counter()
        store.ping()
        elapsed_ms = (time.perf_counter() - start) * 1000

        print(f"{seq+1}: {elapsed_ms:.2f} ms")
        time.sleep(cfg.delay / 1000)

def run(cfg, store, rnd, save_maps=None, save_plot=None):
    if cfg.stat == 'overview':
        return overview(cfg, store)
    elif cfg.stat == 'vmstat':
        return vmstat(cfg, store)
    elif cfg.stat == 'vmpage':
        return vmpage(cfg, store, rnd, save_maps=save_maps)
    elif cfg.stat == 'ondisk-size':
        return ondisk_size(cfg, store, save_plot=save_plot)
    elif cfg.stat == 'latency':
        return latency(cfg, store)
    else:
        assert False
